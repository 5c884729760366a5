"""
A process-wide application settings store persisted as JSON through the
storage service.
"""

import json
import logging
from enum import Enum
from typing import Any, Generic, TypeVar

from localstore.core.service import LocalStorageService

log = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class Setting(Generic[T]):
    """A named, typed setting with a default value."""

    def __init__(self, name: str, default: T):
        self.name = name
        self.default = default

    def decode(self, raw: Any) -> T:
        return raw

    def encode(self, value: T) -> Any:
        return value


class BoolSetting(Setting[bool]):
    def decode(self, raw: Any) -> bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return self.default


class EnumSetting(Setting[E]):
    """An enum setting, stored by member name."""

    def __init__(self, name: str, enum_cls: type[E], default: E):
        super().__init__(name, default)
        self.enum_cls = enum_cls

    def decode(self, raw: Any) -> E:
        try:
            return self.enum_cls[raw]
        except (KeyError, TypeError):
            log.debug(f"Unknown value {raw!r} for setting '{self.name}', using default.")
            return self.default

    def encode(self, value: E | str) -> str:
        if isinstance(value, str):
            # Validates the name before it is stored
            return self.enum_cls[value].name
        return value.name


class AppSettings:
    """
    Reads and writes settings by name. Values live in memory until `save`.
    """

    def __init__(self, storage: LocalStorageService, file_path: str = SETTINGS_FILE):
        self._storage = storage
        self.file_path = file_path
        self._values: dict[str, Any] = {}

    async def load(self) -> None:
        """Loads the settings file. A missing or malformed file yields an empty store."""
        text = await self._storage.read_text(self.file_path)
        if text is None:
            self._values = {}
            return
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            log.warning(f"Settings file '{self.file_path}' is malformed: {e}")
            data = {}
        self._values = data if isinstance(data, dict) else {}

    async def save(self) -> bool:
        """Writes all settings back. Returns False if the target folder is missing."""
        payload = json.dumps(self._values, indent=2, sort_keys=True)
        return await self._storage.write_text(self.file_path, payload)

    def get(self, setting: Setting[T]) -> T:
        if setting.name not in self._values:
            return setting.default
        return setting.decode(self._values[setting.name])

    def set(self, setting: Setting[T], value: T) -> None:
        self._values[setting.name] = setting.encode(value)

    def get_raw(self, name: str) -> Any | None:
        return self._values.get(name)

    def set_raw(self, name: str, value: Any) -> None:
        self._values[name] = value

    def names(self) -> list[str]:
        return sorted(self._values)
