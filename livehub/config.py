"""
Raw environment lookup for `livehub.app_config`.

Sources, later ones winning:
1) `env.example` (committed defaults)
2) `env.local` (developer overrides, never committed)
3) the process environment
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

ENV_FILES = ("env.example", "env.local")


class EnvironConfig:
    """Process-wide singleton holding the merged environment."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._values = {}
            cls._instance._load()
        return cls._instance

    def _load(self):
        root = Path(__file__).parent.parent
        for name in ENV_FILES:
            path = root / name
            if path.exists():
                self._values.update(dotenv_values(path))
                logger.debug("Loaded environment variables from {}", path)

        self._values.update(os.environ)

    def get(self, key, default=None):
        """Value for `key`; `default` when unset or declared without a value."""
        value = self._values.get(key)
        return default if value is None else value

    def reload(self):
        """Re-read env files and the environment (tests change os.environ)."""
        self._values.clear()
        self._load()


config = EnvironConfig()
