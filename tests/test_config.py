"""Tests for configuration loading."""

import os
from unittest.mock import patch

import pytest

from proxycmd.config import DEFAULT_PUBLIC_PATTERN, Config
from proxycmd.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("PROXYCMD_PUBLIC_COMMANDS", raising=False)
    monkeypatch.delenv("PROXYCMD_CONFIG_DIR", raising=False)


def test_defaults_without_settings_file(tmp_path):
    config = Config(config_dir=tmp_path)
    assert config.settings == {}
    assert config.private_channel_index == 7
    assert config.private_channel_id == 4294967294
    assert config.private_channel_name == "Proxy"
    assert config.public_commands_enabled is True
    assert config.public_command_pattern.pattern == DEFAULT_PUBLIC_PATTERN
    assert config.login_message_enabled is True
    assert config.logging_level == "INFO"
    assert config.logging_backup_count == 5


def test_loads_settings_yaml(tmp_path):
    (tmp_path / "settings.yaml").write_text(
        "private_channel:\n"
        "  index: 2\n"
        "  name: Commands\n"
        "public_commands:\n"
        "  enabled: false\n"
        "  pattern: '^#(.+)$'\n"
        "login_message: false\n"
        "log_dir: " + str(tmp_path / "logs") + "\n"
    )
    config = Config(config_dir=tmp_path)
    assert config.private_channel_index == 2
    assert config.private_channel_name == "Commands"
    assert config.public_commands_enabled is False
    assert config.public_command_pattern.match("#heal").group(1) == "heal"
    assert config.login_message_enabled is False
    assert config.log_dir == tmp_path / "logs"


def test_env_file_overrides_public_commands(tmp_path):
    (tmp_path / "settings.yaml").write_text("public_commands:\n  enabled: true\n")
    (tmp_path / ".env").write_text("PROXYCMD_PUBLIC_COMMANDS=off\n")
    try:
        config = Config(config_dir=tmp_path)
        assert config.public_commands_enabled is False
    finally:
        os.environ.pop("PROXYCMD_PUBLIC_COMMANDS", None)


def test_config_dir_from_env(tmp_path, monkeypatch):
    (tmp_path / "settings.yaml").write_text("login_message: false\n")
    monkeypatch.setenv("PROXYCMD_CONFIG_DIR", str(tmp_path))
    config = Config()
    assert config.config_dir == tmp_path
    assert config.login_message_enabled is False


def test_non_mapping_settings_file_raises(tmp_path):
    (tmp_path / "settings.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError) as exc_info:
        Config(config_dir=tmp_path)
    assert exc_info.value.setting_name == "settings.yaml"


def test_invalid_pattern_falls_back_to_default(tmp_path):
    config = Config(config_dir=tmp_path, settings={"public_commands": {"pattern": "(unclosed"}})
    assert config.public_command_pattern.pattern == DEFAULT_PUBLIC_PATTERN


def test_pattern_without_group_falls_back_to_default(tmp_path):
    config = Config(config_dir=tmp_path, settings={"public_commands": {"pattern": "^!"}})
    assert config.public_command_pattern.pattern == DEFAULT_PUBLIC_PATTERN


def test_out_of_range_index_falls_back(tmp_path):
    config = Config(config_dir=tmp_path, settings={"private_channel": {"index": 12}})
    assert config.private_channel_index == 7


def test_invalid_section_type_uses_defaults(tmp_path):
    config = Config(config_dir=tmp_path, settings={"private_channel": "seven"})
    assert config.private_channel_index == 7


def test_validate_logs_bad_values(tmp_path):
    config = Config(
        config_dir=tmp_path,
        settings={
            "private_channel": {"index": "x"},
            "public_commands": {"pattern": "(bad"},
        },
    )
    with patch("proxycmd.config.logger") as mock_logger:
        config.validate()
    events = [c.args[0] for c in mock_logger.error.call_args_list]
    assert "config_invalid_value" in events
    assert "config_invalid_pattern" in events


def test_validate_accepts_defaults(tmp_path):
    config = Config(config_dir=tmp_path)
    with patch("proxycmd.config.logger") as mock_logger:
        config.validate()
    mock_logger.error.assert_not_called()
