"""
Prompt templates and builders for documentation generation
"""
from codescribe.agents.prompts.languages import (
    LanguageGroup,
    language_group_for,
    code_language_for,
)
from codescribe.agents.prompts.templates import TEMPLATE_REGISTRY, TemplateSet
from codescribe.agents.prompts.builder import PromptBuilder, PromptFields, render_template

__all__ = [
    'LanguageGroup',
    'language_group_for',
    'code_language_for',
    'TEMPLATE_REGISTRY',
    'TemplateSet',
    'PromptBuilder',
    'PromptFields',
    'render_template',
]
