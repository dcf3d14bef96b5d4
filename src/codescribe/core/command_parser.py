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

"""Parser for PR comment commands"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from loguru import logger

from codescribe import config
from codescribe.config import SUPPORTED_DOC_LANGUAGES
from codescribe.models import Command, CommandOptions, ScopeExpr


COMMAND_RE = re.compile(r'^\s*!([A-Za-z0-9_-]+)(.*)$', re.MULTILINE)
OPTION_RE = re.compile(r'--(\w+)\s+((?!--)\S+)')


@dataclass(frozen=True)
class OptionSpec:
    """Schema entry for one `--key value` option"""
    description: str
    default: Any = None
    validator: Optional[Callable[[Any], bool]] = None
    required: bool = False


@dataclass(frozen=True)
class CommandSpec:
    description: str
    options: Dict[str, OptionSpec]


def _default_commands() -> Dict[str, CommandSpec]:
    return {
        config.COMMAND_NAME: CommandSpec(
            description='Generate documentation for code files',
            options={
                'scope': OptionSpec(
                    description='Filter files: all, include:pattern, exclude:pattern',
                    default='all',
                    validator=lambda value: ScopeExpr.parse(value) is not None,
                ),
                'lang': OptionSpec(
                    description='Documentation language: ' + ', '.join(SUPPORTED_DOC_LANGUAGES),
                    default=config.DOC_LANGUAGE,
                    validator=lambda value: value in SUPPORTED_DOC_LANGUAGES,
                ),
            },
        ),
    }


class CommandParser:
    """
    Parse `!command --key value` trigger comments.

    Validation failures never raise: the returned Command carries
    `valid=False` and the error messages, and the caller decides whether to
    answer with the help text.
    """

    def __init__(self, commands: Optional[Dict[str, CommandSpec]] = None):
        self.commands = commands if commands is not None else _default_commands()

    def parse(self, comment_body: str) -> Optional[Command]:
        """
        Parse command from comment body.

        Returns:
            Parsed Command, or None when the comment holds no supported command
        """
        if not comment_body or not isinstance(comment_body, str):
            return None

        match = COMMAND_RE.search(comment_body)
        if not match:
            logger.debug("No command pattern found in comment")
            return None

        name, options_string = match.group(1), match.group(2)
        spec = self.commands.get(name)
        if spec is None:
            logger.debug(f"Unknown command: {name}")
            return None

        logger.info(f"Parsing command: {name}")
        raw_options = self.parse_options(options_string, spec.options)
        errors = self.validate_options(raw_options, spec.options)
        if errors:
            logger.warning(f"Command validation errors: {errors}")

        raw_scope = str(raw_options.get('scope') or 'all')
        options = CommandOptions(
            scope=ScopeExpr.parse(raw_scope) or ScopeExpr.all(),
            lang=raw_options.get('lang'),
            raw_scope=raw_scope,
        )

        return Command(
            name=name,
            options=options,
            valid=not errors,
            errors=tuple(errors),
            raw=match.group(0).strip(),
        )

    def parse_options(self, options_string: str, option_specs: Dict[str, OptionSpec]) -> Dict[str, Any]:
        """Apply defaults, then override them with `--key value` pairs"""
        options = {key: spec.default for key, spec in option_specs.items()}

        if not options_string or not options_string.strip():
            return options

        for key, value in OPTION_RE.findall(options_string):
            if key in option_specs:
                options[key] = value
            else:
                logger.warning(f"Unknown option: --{key}")

        return options

    def validate_options(self, options: Dict[str, Any], option_specs: Dict[str, OptionSpec]) -> List[str]:
        errors = []

        for key, spec in option_specs.items():
            value = options.get(key)

            if spec.required and value is None:
                errors.append(f"Option --{key} is required")
                continue

            if spec.validator and not spec.validator(value):
                errors.append(f"Invalid value for --{key}: {value}. {spec.description}")

        return errors

    def get_help(self, command_name: str) -> str:
        """Markdown help text for a command"""
        spec = self.commands.get(command_name)
        if spec is None:
            return f"Unknown command: {command_name}"

        lines = [f"**!{command_name}** - {spec.description}", "", "**Options:**"]
        for key, opt in spec.options.items():
            required = ' (required)' if opt.required else ''
            default = f" (default: {opt.default})" if opt.default else ''
            lines.append(f"- `--{key}`: {opt.description}{required}{default}")

        lines += [
            "",
            "**Examples:**",
            f"- `!{command_name}` - Use all defaults",
            f"- `!{command_name} --scope include:utils,services` - Only document utils and services",
            f"- `!{command_name} --scope exclude:test --lang ko` - Exclude test files, Korean docs",
        ]
        return "\n".join(lines) + "\n"

    def contains_command(self, text: str) -> bool:
        return bool(text) and COMMAND_RE.search(text) is not None
