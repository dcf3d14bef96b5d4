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

import os
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_DOC_LANGUAGES = ('ko', 'en')


class AppConfig(BaseSettings):
    """
    Application configuration using Pydantic BaseSettings.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. Configuration file (conf/codescribe.conf)
    3. Default values defined here

    Inside GitHub Actions most values arrive as environment variables
    (GITHUB_TOKEN, GITHUB_REPOSITORY, GITHUB_EVENT_NAME, GITHUB_EVENT_PATH)
    or as `INPUT_*` variables mapped in the workflow.
    """

    # GitHub configuration
    GITHUB_TOKEN: str = ''
    GITHUB_REPO: str = ''  # 'owner/repo'; falls back to GITHUB_REPOSITORY, then the git remote
    GITHUB_API_URL: str = 'https://api.github.com'
    GITHUB_EVENT_NAME: str = ''
    GITHUB_EVENT_PATH: str = ''
    REQUEST_TIMEOUT: int = 30

    # Local checkout used to auto-detect the repository
    REPO_PATH: str = Field(default_factory=lambda: str(Path.cwd()))

    # LLM configuration
    LLM_MODEL: str = 'gemini-2.0-flash'
    LLM_PROVIDER: str = 'google_genai'
    LLM_API_KEY: str = ''
    LLM_URL: str = ''
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 8192

    # Documentation configuration
    DOC_LANGUAGE: str = 'en'
    COMMAND_NAME: str = 'doxai'

    # Logging configuration
    LOG_DIR: str = Field(default_factory=lambda: str(Path.cwd() / 'logs'))
    LOG_LEVEL: str = 'INFO'

    # Field validators
    @field_validator('DOC_LANGUAGE', mode='before')
    @classmethod
    def check_doc_language(cls, v):
        """Only Korean and English templates exist"""
        if isinstance(v, str):
            v = v.strip().lower()
        if v not in SUPPORTED_DOC_LANGUAGES:
            raise ValueError(
                f"Unsupported language: {v}. Supported languages: {', '.join(SUPPORTED_DOC_LANGUAGES)}"
            )
        return v

    @field_validator('REQUEST_TIMEOUT', 'LLM_MAX_TOKENS', mode='before')
    @classmethod
    def parse_int(cls, v):
        """Parse integers from config file strings"""
        if isinstance(v, str):
            return int(v.strip())
        return v

    model_config = SettingsConfigDict(
        env_file=None,  # We'll handle config file loading manually
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore',  # Ignore extra fields in config file
    )

    @property
    def repository(self) -> str:
        """Configured 'owner/repo', preferring GITHUB_REPO over the Actions default"""
        return self.GITHUB_REPO or os.environ.get('GITHUB_REPOSITORY', '')

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> 'AppConfig':
        """
        Load configuration from file and environment variables.

        Args:
            config_path: Path to config file. If None, will search in default locations.

        Returns:
            AppConfig instance
        """
        if config_path is None:
            possible_paths = [
                Path(__file__).parent.parent.parent / "conf" / "codescribe.conf",
                Path.cwd() / "conf" / "codescribe.conf",
            ]

            for path in possible_paths:
                if path.exists():
                    config_path = str(path)
                    break

        config_dict = load_config_from_file(config_path) if config_path else {}

        # Merge with environment variables (env vars take precedence)
        for field_name in cls.model_fields.keys():
            env_value = os.environ.get(field_name)
            if env_value is not None:
                config_dict[field_name] = env_value

        return cls(**config_dict)


def load_config_from_file(config_path: str) -> dict:
    """
    Read `KEY=value` lines from a config file.

    Blank lines and `#` comments are skipped, surrounding quotes are removed.
    A missing file yields an empty dict.
    """
    config_dict = {}
    if not config_path or not os.path.exists(config_path):
        return config_dict

    with open(config_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            if '=' in line:
                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip()

                # Remove quotes
                if value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                elif value.startswith("'") and value.endswith("'"):
                    value = value[1:-1]

                config_dict[key] = value

    return config_dict


# Global configuration instance
config = AppConfig.load_from_file()

def reload_config(config_path: Optional[str] = None):
    """
    Reload configuration from file.

    Args:
        config_path: Path to config file. If None, will search in default locations.
    """
    global config
    config = AppConfig.load_from_file(config_path)


# This allows `config.LLM_MODEL` on the module to track reload_config()
def __getattr__(name: str):
    """
    Automatically expose config attributes as module-level variables.
    """
    if hasattr(config, name):
        return getattr(config, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
