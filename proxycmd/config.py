"""Configuration management for proxycmd.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a typed Config object. Property getters provide safe access with
defaults for the private channel, public command triggers, and logging.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Lazily created Config for the console entry point.
"""

import os
import re
from pathlib import Path
from typing import Optional, Pattern

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = structlog.get_logger("proxycmd")

DEFAULT_PRIVATE_CHANNEL_INDEX = 7
DEFAULT_PRIVATE_CHANNEL_ID = 0xFFFFFFFE
DEFAULT_PRIVATE_CHANNEL_NAME = "Proxy"
DEFAULT_PUBLIC_PATTERN = r"^!([^!].*)$"

_TRUTHY = {"1", "true", "yes", "on"}


class Config:
    """Central configuration manager for proxycmd.

    Loads settings.yaml and .env from the config directory. Missing
    files are not an error; every setting has a default.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``$PROXYCMD_CONFIG_DIR`` or ``<repo_root>/config/``.
        settings: Use these settings instead of reading settings.yaml.
    """

    def __init__(self, config_dir: Optional[Path] = None, settings: Optional[dict] = None):
        if config_dir is None:
            env_dir = os.environ.get("PROXYCMD_CONFIG_DIR")
            config_dir = Path(env_dir) if env_dir else Path(__file__).parent.parent / "config"
        self.config_dir = config_dir

        env_file = config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = settings if settings is not None else self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if not filepath.exists():
            return {}
        with open(filepath, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Top level of settings file must be a mapping",
                setting_name=filename,
                type=type(data).__name__,
            )
        return data

    def _section(self, name: str) -> dict:
        section = self.settings.get(name, {})
        if not isinstance(section, dict):
            logger.error("config_section_invalid_type", section=name, type=type(section).__name__)
            return {}
        return section

    def validate(self):
        """Validate settings at startup.

        Logs errors for unusable values but does not raise; the
        property getters fall back to defaults for them.
        """
        index = self._section("private_channel").get("index")
        if index is not None and (not isinstance(index, int) or not 0 <= index <= 7):
            logger.error("config_invalid_value", key="private_channel.index", value=index, valid="0-7")

        raw = self._section("public_commands").get("pattern")
        if raw is not None:
            try:
                if re.compile(raw).groups < 1:
                    logger.error(
                        "config_invalid_value",
                        key="public_commands.pattern",
                        value=raw,
                        valid="regex with a capture group",
                    )
            except (re.error, TypeError) as e:
                logger.error("config_invalid_pattern", key="public_commands.pattern", error=str(e))

    # --- private channel ---

    @property
    def private_channel_index(self) -> int:
        """Private channel slot used for the proxy tab (default 7)."""
        index = self._section("private_channel").get("index", DEFAULT_PRIVATE_CHANNEL_INDEX)
        if not isinstance(index, int) or not 0 <= index <= 7:
            return DEFAULT_PRIVATE_CHANNEL_INDEX
        return index

    @property
    def private_channel_id(self) -> int:
        """Channel id the proxy tab is registered under."""
        return self._section("private_channel").get("id", DEFAULT_PRIVATE_CHANNEL_ID)

    @property
    def private_channel_name(self) -> str:
        return self._section("private_channel").get("name", DEFAULT_PRIVATE_CHANNEL_NAME)

    @property
    def login_message_enabled(self) -> bool:
        """Whether to greet the user in the proxy tab after login."""
        return bool(self.settings.get("login_message", True))

    # --- public commands ---

    @property
    def public_commands_enabled(self) -> bool:
        """Whether "!command" in chat and whispers is handled.

        Env var PROXYCMD_PUBLIC_COMMANDS takes precedence.
        """
        env = os.environ.get("PROXYCMD_PUBLIC_COMMANDS")
        if env is not None:
            return env.strip().lower() in _TRUTHY
        return bool(self._section("public_commands").get("enabled", True))

    @property
    def public_command_pattern(self) -> Pattern[str]:
        """Compiled trigger pattern; group 1 is the command string."""
        raw = self._section("public_commands").get("pattern", DEFAULT_PUBLIC_PATTERN)
        try:
            pattern = re.compile(raw)
        except (re.error, TypeError):
            return re.compile(DEFAULT_PUBLIC_PATTERN)
        if pattern.groups < 1:
            return re.compile(DEFAULT_PUBLIC_PATTERN)
        return pattern

    # --- logging ---

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        return self._section("logging").get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        return self._section("logging").get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        return self._section("logging").get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        return self._section("logging").get("backup_count", 5)


_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
