"""
Test trigger comment parsing
"""
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from codescribe.core.command_parser import CommandParser
from codescribe.models import ScopeExpr, ScopeKind


def test_defaults_applied():
    command = CommandParser().parse('!doxai')

    assert command is not None
    assert command.name == 'doxai'
    assert command.valid
    assert command.options.scope == ScopeExpr.all()
    assert command.options.lang == 'en'


def test_scope_and_lang_options():
    command = CommandParser().parse('!doxai --scope include:src/,lib --lang ko')

    assert command.valid
    assert command.options.scope.kind == ScopeKind.INCLUDE
    assert command.options.scope.patterns == ('src/', 'lib')
    assert command.options.lang == 'ko'


def test_dashes_allowed_inside_values():
    command = CommandParser().parse('!doxai --scope include:user-service')
    assert command.options.scope.patterns == ('user-service',)


def test_command_inside_multiline_comment():
    body = "Thanks for the review!\n\n!doxai --scope exclude:test\nPlease check."
    command = CommandParser().parse(body)

    assert command is not None
    assert command.options.scope.kind == ScopeKind.EXCLUDE
    assert command.raw == '!doxai --scope exclude:test'


def test_non_commands_return_none():
    parser = CommandParser()
    assert parser.parse('') is None
    assert parser.parse(None) is None
    assert parser.parse('LGTM') is None
    assert parser.parse('!deploy --env prod') is None
    # A command token must start a line
    assert parser.parse('see !doxai') is None


def test_unknown_option_is_ignored():
    command = CommandParser().parse('!doxai --verbose yes --lang ko')
    assert command.valid
    assert command.options.lang == 'ko'


def test_invalid_lang_reported():
    command = CommandParser().parse('!doxai --lang fr')

    assert not command.valid
    assert command.errors == ('Invalid value for --lang: fr. Documentation language: ko, en',)
    assert command.options.lang == 'fr'


def test_invalid_scope_falls_back_to_all():
    command = CommandParser().parse('!doxai --scope some')

    assert not command.valid
    assert command.options.scope == ScopeExpr.all()
    assert command.options.raw_scope == 'some'
    assert 'Invalid value for --scope: some' in command.errors[0]


def test_get_help():
    parser = CommandParser()
    help_text = parser.get_help('doxai')

    assert help_text.startswith('**!doxai**')
    assert '`--scope`' in help_text
    assert '(default: all)' in help_text
    assert '`--lang`' in help_text
    assert '**Examples:**' in help_text
    assert parser.get_help('deploy') == 'Unknown command: deploy'


def test_contains_command():
    parser = CommandParser()
    assert parser.contains_command('!doxai --lang ko')
    assert not parser.contains_command('no command here')
    assert not parser.contains_command('')
