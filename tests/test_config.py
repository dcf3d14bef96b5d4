"""Test configuration loading"""
import os
import tempfile
from pathlib import Path
import sys

import pytest
from pydantic import ValidationError

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from codescribe import config
from codescribe.config import AppConfig


def _write_conf(*lines) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.conf', delete=False, encoding='utf-8') as f:
        f.write('\n'.join(lines) + '\n')
        return f.name


def test_load_config_from_file():
    """Test reading KEY=value lines"""
    temp_path = _write_conf(
        '# test configuration',
        'GITHUB_REPO=acme/widgets',
        'LLM_MODEL=gpt-4o-mini',
        'LLM_API_KEY=test-key-123',
        '',
        '# comment line',
    )
    try:
        cfg = config.load_config_from_file(temp_path)

        assert cfg['GITHUB_REPO'] == 'acme/widgets'
        assert cfg['LLM_MODEL'] == 'gpt-4o-mini'
        assert cfg['LLM_API_KEY'] == 'test-key-123'
        assert len(cfg) == 3
    finally:
        os.unlink(temp_path)


def test_config_with_quotes():
    """Test quoted values"""
    temp_path = _write_conf(
        'KEY1="value with spaces"',
        "KEY2='single quotes'",
        'KEY3=no quotes',
        'KEY4=a=b',
    )
    try:
        cfg = config.load_config_from_file(temp_path)

        assert cfg['KEY1'] == 'value with spaces'
        assert cfg['KEY2'] == 'single quotes'
        assert cfg['KEY3'] == 'no quotes'
        assert cfg['KEY4'] == 'a=b'
    finally:
        os.unlink(temp_path)


def test_missing_config_file():
    assert config.load_config_from_file('/nonexistent/codescribe.conf') == {}


def test_reload_config():
    """Test reloading configuration from a file"""
    temp_path = _write_conf('COMMAND_NAME=docbot', 'REQUEST_TIMEOUT=45')
    try:
        config.reload_config(temp_path)

        if 'COMMAND_NAME' not in os.environ:
            assert config.COMMAND_NAME == 'docbot'
        if 'REQUEST_TIMEOUT' not in os.environ:
            assert config.REQUEST_TIMEOUT == 45
    finally:
        os.unlink(temp_path)
        config.reload_config()


def test_env_overrides_file(monkeypatch):
    temp_path = _write_conf('LLM_MODEL=from-file')
    monkeypatch.setenv('LLM_MODEL', 'from-env')
    try:
        cfg = AppConfig.load_from_file(temp_path)
        assert cfg.LLM_MODEL == 'from-env'
    finally:
        os.unlink(temp_path)


def test_doc_language_validation():
    assert AppConfig(DOC_LANGUAGE=' KO ').DOC_LANGUAGE == 'ko'
    with pytest.raises(ValidationError):
        AppConfig(DOC_LANGUAGE='fr')


def test_repository_fallback(monkeypatch):
    monkeypatch.setenv('GITHUB_REPOSITORY', 'octo/actions-repo')
    assert AppConfig(GITHUB_REPO='').repository == 'octo/actions-repo'
    assert AppConfig(GITHUB_REPO='acme/widgets').repository == 'acme/widgets'


def test_module_attribute_forwarding():
    assert config.LLM_MAX_TOKENS == config.config.LLM_MAX_TOKENS
    with pytest.raises(AttributeError):
        config.NOT_A_SETTING
