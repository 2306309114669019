"""
Configuration — loads settings from .patchengine.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "context_lines": 3,
    "preview_lines": 10,
    "confirm_inserts": False,
    "auto_approve": False,
    "confirmation_ui": "textual",
    "log_dir": ".patchengine/logs",
    "journal_enabled": True,
}

_CONFIRMATION_UIS = ("textual", "console")

# Config file search locations
_CONFIG_FILENAMES = [".patchengine.yaml", ".patchengine.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Patch engine configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``PATCHENGINE_*``)
    3. .patchengine.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.CONTEXT_LINES = _get("PATCHENGINE_CONTEXT_LINES", "context_lines",
                                  _DEFAULTS["context_lines"], cast=int)
        self.PREVIEW_LINES = _get("PATCHENGINE_PREVIEW_LINES", "preview_lines",
                                  _DEFAULTS["preview_lines"], cast=int)

        # Confirmation policy
        self.CONFIRM_INSERTS = _get_bool("PATCHENGINE_CONFIRM_INSERTS",
                                         "confirm_inserts",
                                         _DEFAULTS["confirm_inserts"])
        self.AUTO_APPROVE = _get_bool("PATCHENGINE_AUTO_APPROVE", "auto_approve",
                                      _DEFAULTS["auto_approve"])
        self.CONFIRMATION_UI = _get("PATCHENGINE_CONFIRMATION_UI",
                                    "confirmation_ui",
                                    _DEFAULTS["confirmation_ui"]).lower()
        if self.CONFIRMATION_UI not in _CONFIRMATION_UIS:
            self.CONFIRMATION_UI = _DEFAULTS["confirmation_ui"]

        self.LOG_DIR = _get("PATCHENGINE_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])
        self.JOURNAL_ENABLED = _get_bool("PATCHENGINE_JOURNAL_ENABLED",
                                         "journal_enabled",
                                         _DEFAULTS["journal_enabled"])

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
