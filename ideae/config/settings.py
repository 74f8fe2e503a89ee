"""
Configuration using Pydantic settings.

Settings come from, in increasing priority: defaults, ``IDEAE_*`` environment
variables, and an optional YAML file (``.ideae/config.yaml`` by default).

Example config file::

    provider: gitlab
    repository: group/subgroup/project
    data_directory: ${IDEAE_HOME:-.ideae}
    issue_list_limit: 100
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ideae.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = ".ideae/config.yaml"


class IdeaeSettings(BaseSettings):
    """Main ideae settings."""

    model_config = SettingsConfigDict(
        env_prefix="IDEAE_",
        case_sensitive=False,
    )

    data_directory: str = Field(default=".ideae", description="Directory holding the store files")
    provider: Literal["auto", "github", "gitlab", "none"] = Field(
        default="auto",
        description="Remote tracker; 'auto' detects it from the git remote, 'none' runs local-only",
    )
    repository: str | None = Field(default=None, description="Repository path on the tracker (owner/repo)")
    issue_list_limit: int = Field(default=50, ge=1, le=500, description="Remote issues fetched per sync")
    agent_list_limit: int = Field(default=30, ge=1, le=500, description="Agent tasks fetched per refresh")
    issue_suggestion_limit: int = Field(default=10, ge=1, description="Maximum '#' suggestions shown")
    file_suggestion_limit: int = Field(default=20, ge=1, description="Maximum '@' suggestions shown")
    log_level: str = Field(default="WARNING", description="Minimum log level")

    def data_dir(self, cwd: Path) -> Path:
        """Data directory resolved against the working directory."""
        path = Path(self.data_directory)
        return path if path.is_absolute() else cwd / path

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> IdeaeSettings:
        """Load settings from a YAML file with environment variable interpolation.

        Supports ``${VAR_NAME}`` and ``${VAR_NAME:-default}``.

        Raises:
            ConfigurationError: If the file is missing, unreadable, or invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Replace ``${VAR}`` / ``${VAR:-default}`` placeholders.

        YAML comment lines are left untouched.

        Raises:
            ValueError: If a required variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            if default_value is not None:
                return default_value
            raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))


def load_settings(config_path: str | Path | None = None, cwd: Path | None = None) -> IdeaeSettings:
    """Load settings, falling back to defaults when no config file exists.

    Args:
        config_path: Explicit config file; must exist when given
        cwd: Directory the default config path is resolved against
    """
    if config_path is not None:
        return IdeaeSettings.from_yaml(config_path)

    default_path = (cwd or Path.cwd()) / DEFAULT_CONFIG_PATH
    if default_path.exists():
        return IdeaeSettings.from_yaml(default_path)

    try:
        return IdeaeSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid IDEAE_* environment settings: {e}") from e
