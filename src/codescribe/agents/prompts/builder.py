# Copyright 2025-present CodeScribe Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from dataclasses import dataclass, asdict
from datetime import datetime
from string import Template
from typing import Optional, Tuple
from loguru import logger

from codescribe.agents.prompts.languages import code_language_for, language_group_for
from codescribe.agents.prompts.templates import TEMPLATE_REGISTRY, TemplateSet
from codescribe.models import PRDetails


@dataclass(frozen=True)
class PromptFields:
    """Values substituted into a user prompt template"""
    pr_number: int
    author: str
    created_date: str
    updated_date: str
    updated_by: str
    filename: str
    file_content: str
    code_language: str
    existing_doc_content: Optional[str] = None

    @property
    def code_fence(self) -> str:
        return self.code_language.lower()

    def as_mapping(self) -> dict:
        # None fields are left out so a template that needs them fails loudly
        mapping = {k: v for k, v in asdict(self).items() if v is not None}
        mapping['code_fence'] = self.code_fence
        return mapping


def render_template(template: str, fields: PromptFields) -> str:
    """
    Fill a template.

    Raises:
        KeyError: If the template references a field that has no value
    """
    return Template(template).substitute(fields.as_mapping())


def format_date(value: str) -> str:
    """ISO timestamp to YYYY-MM-DD; unparseable values are returned as is"""
    if not value:
        return ''
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date().isoformat()
    except ValueError:
        return value


class PromptBuilder:
    """Build (system, user) prompt pairs for one source file"""

    def get_template_set(self, filename: str, lang: str) -> TemplateSet:
        group = language_group_for(filename)
        try:
            return TEMPLATE_REGISTRY[(group, lang)]
        except KeyError:
            raise ValueError(f"No templates for documentation language: {lang}")

    def build(
        self,
        filename: str,
        content: str,
        pr: PRDetails,
        lang: str,
        existing_doc: Optional[str] = None,
    ) -> Tuple[str, str]:
        """
        Args:
            filename: Source path as shown in the PR
            content: Source file content
            pr: Originating PR, used for the metadata table
            lang: Documentation language ('en' or 'ko')
            existing_doc: Current documentation; selects the update template

        Returns:
            (system_prompt, user_prompt)
        """
        templates = self.get_template_set(filename, lang)
        fields = PromptFields(
            pr_number=pr.number,
            author=pr.author,
            created_date=format_date(pr.created_at),
            updated_date=format_date(pr.updated_at),
            updated_by=pr.merged_by or pr.author,
            filename=filename,
            file_content=content,
            code_language=code_language_for(filename),
            existing_doc_content=existing_doc,
        )

        is_update = existing_doc is not None
        template = templates.update_template if is_update else templates.create_template
        logger.debug(f"Building {'update' if is_update else 'create'} prompt for {filename} "
                     f"({language_group_for(filename).value}, {lang})")
        return templates.system_prompt, render_template(template, fields)
