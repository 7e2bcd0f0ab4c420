from __future__ import annotations

import logging
from datetime import time

from ..common.datetime_utils import parse_time_of_day
from ..core.constants import SETTING_DEFAULTS
from ..core.enums import RetentionPolicy
from ..core.exceptions import ConfigurationError
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class SettingsService:
    """Typed read access to the Settings Store.

    Missing keys fall back to ``SETTING_DEFAULTS``; a stored value that cannot
    be coerced raises ``ConfigurationError`` instead of silently defaulting.
    """

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def _raw(self, key: str, default: str | None = None) -> str | None:
        value = self._settings.get_value(key)
        if value is not None:
            return value
        if default is not None:
            return default
        return SETTING_DEFAULTS.get(key, (None, None))[1]

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self._raw(key, default)
        return value.strip() if value is not None else None

    def get_bool(self, key: str, default: bool | None = None) -> bool:
        value = self._raw(key, None if default is None else ("1" if default else "0"))
        normalized = (value or "").strip().lower()
        if normalized in _TRUE:
            return True
        if normalized in _FALSE:
            return False
        raise ConfigurationError(f"Setting {key!r} is not a boolean: {value!r}")

    def get_int(self, key: str, default: int | None = None) -> int:
        value = self._raw(key, None if default is None else str(default))
        try:
            return int(str(value).strip())
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Setting {key!r} is not an integer: {value!r}") from exc

    def get_time(self, key: str, default: time | None = None) -> time:
        value = self._raw(key, None if default is None else default.strftime("%H:%M"))
        try:
            return parse_time_of_day(str(value))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Setting {key!r} is not a time of day: {value!r}") from exc

    def retention_policy(self) -> RetentionPolicy:
        value = self.get_str("retention_policy")
        try:
            return RetentionPolicy(value)
        except ValueError:
            logger.warning("Unknown retention policy %r, using %s", value, RetentionPolicy.ONE_YEAR.value)
            return RetentionPolicy.ONE_YEAR
