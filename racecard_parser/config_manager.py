import copy
import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional


DEFAULT_CONFIG: Dict[str, Any] = {
    "APP_NAME": "Racecard Parser",
    "LOG_FILE": "logs/racecard_parser.log",
    "HTTP_CLIENT": {
        "timeout_sec": 15.0,
        "connect_timeout_sec": 10.0,
        "attempts": 3,
        "backoff_sec": 1.0,
        "request_pause_sec": 0.5,
        "follow_redirects": True,
        "http2": False,
        "proxy": None,
        "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    },
    "DATA_SOURCES_V2": {
        "sportsbet": {
            "enabled": True,
            "base_url": "https://www.sportsbet.com.au",
            "schedule_path": "/racing-schedule/{scope}",
            "default_scope": "horse/today",
            "country": None,
            "excluded_track_slugs": [],
            "selectors": {},
        }
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """
    A centralized manager for loading and accessing application configuration.

    Settings come from a JSON file layered over DEFAULT_CONFIG, so a missing
    or partial file still yields a complete configuration.
    """

    _instance = None

    def __new__(cls, *args, **kwargs):
        if not cls._instance:
            cls._instance = super(ConfigurationManager, cls).__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[str] = None):
        # The __init__ will only run on the first instantiation
        if hasattr(self, "_config"):
            return

        self.config_path = Path(
            config_path or os.environ.get("RACECARD_CONFIG", "config_settings.json")
        )
        self._config = self._load_config()
        logging.info(f"ConfigurationManager initialized with config from '{self.config_path}'.")

    def _load_config(self) -> Dict[str, Any]:
        """
        Loads the configuration file and merges it over the built-in defaults.
        """
        if not self.config_path.exists():
            logging.warning(
                f"Configuration file '{self.config_path}' not found. Using built-in defaults."
            )
            return copy.deepcopy(DEFAULT_CONFIG)
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                return _deep_merge(DEFAULT_CONFIG, json.load(f))
        except json.JSONDecodeError as e:
            logging.critical(
                f"Could not parse configuration file '{self.config_path}': {e}. Using built-in defaults."
            )
            return copy.deepcopy(DEFAULT_CONFIG)

    def reload(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Re-reads the configuration, optionally from a different file."""
        if config_path:
            self.config_path = Path(config_path)
        self._config = self._load_config()
        logging.info(f"Configuration reloaded from '{self.config_path}'.")
        return self._config

    def get_config(self) -> Dict[str, Any]:
        return self._config

    def get_section(self, name: str) -> Dict[str, Any]:
        return self._config.get(name) or {}

    def get_adapter_config(self, source_id: str) -> Optional[Dict[str, Any]]:
        """
        Returns the DATA_SOURCES_V2 entry for source_id if it exists and is enabled.
        """
        if not source_id:
            return None

        site_config = self._config.get("DATA_SOURCES_V2", {}).get(source_id)
        if site_config and site_config.get("enabled", False):
            logging.debug(f"Found V2 config for '{source_id}'.")
            return site_config

        logging.info(f"No enabled configuration found for adapter '{source_id}'.")
        return None


# Global instance for easy access across the application
config_manager = ConfigurationManager()
