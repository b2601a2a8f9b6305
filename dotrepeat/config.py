"""Configuration management: JSON-based, stored in ~/.config/dotrepeat/."""
import json
import logging
from pathlib import Path

from dotrepeat.classifier import (
    DEFAULT_COMPLETION_COMMANDS, DEFAULT_HARD_RESET_COMMANDS,
    DEFAULT_RECORD_COMMANDS, DEFAULT_SENTINEL, SELF_INSERT,
)
from dotrepeat.events import CompletionSentinel
from dotrepeat.ring import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "enabled": True,
    "debug_logging": False,
    "ring_capacity": DEFAULT_CAPACITY,
    "log_size": 300,  # events of history kept for classification
    "neutral_commands": [],
    "record_commands": sorted(DEFAULT_RECORD_COMMANDS),
    # X11 keys only reach these as "key:<code>" names; see dotrepeat.keymap
    "completion_commands": sorted(DEFAULT_COMPLETION_COMMANDS),
    "hard_reset_commands": sorted(DEFAULT_HARD_RESET_COMMANDS),
    "self_insert_command": SELF_INSERT,
    "hotkey_repeat": "ctrl+.",
    "hotkey_replay_completion": "ctrl+shift+.",
    "completion_sentinel_keys": list(DEFAULT_SENTINEL.keys),
}

CONFIG_DIR = Path.home() / ".config" / "dotrepeat"
CONFIG_FILE = CONFIG_DIR / "config.json"


class Config:
    def __init__(self, path: Path = CONFIG_FILE):
        self._path = Path(path)
        self._data = dict(DEFAULT_CONFIG)
        self.load()

    def load(self):
        if self._path.exists():
            try:
                with open(self._path, "r") as f:
                    stored = json.load(f)
                self._data.update(stored)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning("Ignoring unreadable config %s: %s", self._path, e)

    def save(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value
        self.save()

    @property
    def enabled(self):
        return self._data["enabled"]

    @enabled.setter
    def enabled(self, val):
        self._data["enabled"] = bool(val)
        self.save()

    @property
    def debug_logging(self):
        return self._data["debug_logging"]

    @property
    def ring_capacity(self):
        return int(self._data["ring_capacity"])

    @property
    def log_size(self):
        return int(self._data.get("log_size", 300))

    @property
    def neutral_commands(self):
        return self._data["neutral_commands"]

    @property
    def record_commands(self):
        return self._data["record_commands"]

    @property
    def completion_commands(self):
        return self._data["completion_commands"]

    @property
    def hard_reset_commands(self):
        return self._data["hard_reset_commands"]

    @property
    def self_insert_command(self):
        return self._data["self_insert_command"]

    @property
    def hotkey_repeat(self):
        return self._data["hotkey_repeat"]

    @property
    def hotkey_replay_completion(self):
        return self._data["hotkey_replay_completion"]

    @property
    def completion_sentinel(self) -> CompletionSentinel:
        first, second = self._data["completion_sentinel_keys"]
        return CompletionSentinel((first, second))
