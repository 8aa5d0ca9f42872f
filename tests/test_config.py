"""Tests for layered configuration loading."""

import json
import os

import pytest

from hipster.config import BUILD_DIRECTORIES_ENV, HipsterConfig, load_config
from hipster.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(BUILD_DIRECTORIES_ENV, raising=False)


def write_settings(root, settings):
    """Write .vscode/settings.json under root."""
    settings_dir = root / '.vscode'
    settings_dir.mkdir(exist_ok=True)
    path = settings_dir / 'settings.json'
    if isinstance(settings, str):
        path.write_text(settings, encoding='utf-8')
    else:
        path.write_text(json.dumps(settings), encoding='utf-8')
    return path


def test_defaults(tmp_path):
    """Without any settings the build directory is 'build'."""
    config = load_config(str(tmp_path))

    assert config.build_directories == ['build']
    assert config.demangler == ['c++filt', '-n']


def test_empty_list_falls_back_to_default():
    """An empty directory list is replaced with the default."""
    assert HipsterConfig(build_directories=[]).build_directories == ['build']


def test_assembly_file_convention():
    """Only device assembly dumps are accepted."""
    config = HipsterConfig()
    assert config.is_assembly_file('k-hip-amdgcn-amd-amdhsa-gfx90a.s')
    assert not config.is_assembly_file('k-host-x86_64-unknown-linux-gnu.s')
    assert not config.is_assembly_file('k-hip-amdgcn-amd-amdhsa-gfx90a.o')


def test_settings_file(tmp_path):
    """The editor settings file supplies build directories."""
    write_settings(tmp_path, {'hipster.buildDirectories': ['out/a', 'out/b'], 'other': 1})

    assert load_config(str(tmp_path)).build_directories == ['out/a', 'out/b']


def test_settings_without_key_ignored(tmp_path):
    """Settings files without the key keep the default."""
    write_settings(tmp_path, {'editor.tabSize': 4})

    assert load_config(str(tmp_path)).build_directories == ['build']


def test_environment_overrides_settings(tmp_path, monkeypatch):
    """The environment variable takes precedence over the settings file."""
    write_settings(tmp_path, {'hipster.buildDirectories': ['from-settings']})
    monkeypatch.setenv(BUILD_DIRECTORIES_ENV, os.pathsep.join(['env1', 'env2']))

    assert load_config(str(tmp_path)).build_directories == ['env1', 'env2']


def test_arguments_override_everything(tmp_path, monkeypatch):
    """Explicit directories win over every other layer."""
    write_settings(tmp_path, {'hipster.buildDirectories': ['from-settings']})
    monkeypatch.setenv(BUILD_DIRECTORIES_ENV, 'from-env')

    config = load_config(str(tmp_path), build_directories=['cli'])

    assert config.build_directories == ['cli']


def test_invalid_json_raises(tmp_path):
    """A malformed settings file is a configuration error."""
    write_settings(tmp_path, '{"hipster.buildDirectories": [')

    with pytest.raises(ConfigurationError, match='Invalid JSON'):
        load_config(str(tmp_path))


def test_wrong_value_type_raises(tmp_path):
    """The setting must be a list of strings."""
    write_settings(tmp_path, {'hipster.buildDirectories': 'build'})

    with pytest.raises(ConfigurationError, match='list of strings'):
        load_config(str(tmp_path))
