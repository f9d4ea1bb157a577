"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from modpkg.exceptions import ConfigurationError
from modpkg.models.config import AppConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> AppConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.
        A missing file means built-in defaults.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated AppConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
            config_from_file = self._get_config_as_dict()

        if cli_options:
            config_from_file.update(cli_options)

        try:
            return AppConfig(**config_from_file)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_default_config(self) -> None:
        """Creates and saves a configuration file holding every default value."""
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}
        defaults = AppConfig()
        for key in sorted(AppConfig.get_ini_keys()):
            config["DEFAULT"][key] = self._to_ini_value(getattr(defaults, key))

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini_value(value: Any) -> str:
        if value is None:
            return "0"
        return str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        raw = {
            "data_dir": section.get("data_dir"),
            "catalog_url": section.get("catalog_url"),
            "meta_api_url": section.get("meta_api_url"),
            "max_downloads": section.get("max_downloads"),
            "request_timeout": section.get("request_timeout"),
            "chunk_size": section.get("chunk_size"),
            "estimated_file_size": section.get("estimated_file_size"),
        }
        # Empty values fall back to model defaults; pydantic coerces the rest.
        return {key: value for key, value in raw.items() if value}

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = AppConfig()
        needs_saving = False
        config_section = self._parser["DEFAULT"]

        for key in sorted(AppConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini_value(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
