"""
Test prompt building: language groups, template registry and typed rendering
"""
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from codescribe.agents.prompts import (
    TEMPLATE_REGISTRY,
    LanguageGroup,
    PromptBuilder,
    PromptFields,
    code_language_for,
    language_group_for,
    render_template,
)
from codescribe.models import PRDetails


def _pr():
    return PRDetails(
        number=42,
        author='alice',
        created_at='2025-01-01T10:00:00Z',
        updated_at='2025-01-03T12:30:00Z',
        merged=True,
        merged_by='bob',
        base='main',
        head='feature/x',
    )


def test_language_groups():
    assert language_group_for('src/Main.java') == LanguageGroup.OOP_CLASS
    assert language_group_for('src/app.kt') == LanguageGroup.OOP_CLASS
    assert language_group_for('src/index.ts') == LanguageGroup.FUNCTIONAL
    assert language_group_for('lib/util.py') == LanguageGroup.FUNCTIONAL
    assert language_group_for('web/App.vue') == LanguageGroup.WEB_FRONTEND
    assert language_group_for('styles/main.scss') == LanguageGroup.WEB_FRONTEND
    assert language_group_for('db/schema.sql') == LanguageGroup.DATA
    assert language_group_for('native/buffer.hpp') == LanguageGroup.NATIVE


def test_unknown_extensions_default_to_functional():
    assert language_group_for('Dockerfile') == LanguageGroup.FUNCTIONAL
    assert language_group_for('build.gradle') == LanguageGroup.FUNCTIONAL


def test_code_language_for():
    assert code_language_for('src/a.js') == 'JavaScript'
    assert code_language_for('src/a.cs') == 'C#'
    assert code_language_for('build.gradle') == 'GRADLE'
    assert code_language_for('noextension') == 'NOEXTENSION'


def test_registry_is_complete_and_read_only():
    for group in LanguageGroup:
        for lang in ('en', 'ko'):
            templates = TEMPLATE_REGISTRY[(group, lang)]
            assert templates.system_prompt
            assert templates.focus_areas
    with pytest.raises(TypeError):
        TEMPLATE_REGISTRY[(LanguageGroup.DATA, 'fr')] = None


def test_system_prompts_differ_by_group():
    oop = TEMPLATE_REGISTRY[(LanguageGroup.OOP_CLASS, 'en')].system_prompt
    data = TEMPLATE_REGISTRY[(LanguageGroup.DATA, 'en')].system_prompt
    assert oop != data
    assert '== Key Queries' in data
    assert '== Class Structure' in oop


def test_build_create_prompt():
    system, user = PromptBuilder().build('src/utils/date.js', 'export const x = 1;', _pr(), 'en')

    assert 'AsciiDoc' in system
    assert '# Documentation Request' in user
    assert '- PR Number: 42' in user
    assert '- Created Date: 2025-01-01' in user
    assert '- Last Modified: 2025-01-03 by bob' in user
    assert '- Filename: src/utils/date.js' in user
    assert '```javascript\nexport const x = 1;\n```' in user
    assert '${' not in user


def test_build_update_prompt_in_korean():
    system, user = PromptBuilder().build('src/Main.java', 'class Main {}', _pr(), 'ko', existing_doc='= Main.java\n')

    assert '한국어' in system
    assert '# 코드 문서 업데이트 요청' in user
    assert '```asciidoc\n= Main.java\n\n```' in user


def test_file_content_with_dollar_signs_is_kept_verbatim():
    content = 'const price = `${amount} $USD`;'
    _, user = PromptBuilder().build('src/price.js', content, _pr(), 'en')
    assert content in user


def test_render_template_rejects_missing_fields():
    fields = PromptFields(
        pr_number=1, author='a', created_date='', updated_date='', updated_by='a',
        filename='a.js', file_content='', code_language='JavaScript',
    )
    update = TEMPLATE_REGISTRY[(LanguageGroup.FUNCTIONAL, 'en')].update_template
    with pytest.raises(KeyError):
        render_template(update, fields)


def test_unsupported_language():
    with pytest.raises(ValueError):
        PromptBuilder().build('src/a.js', '', _pr(), 'fr')
