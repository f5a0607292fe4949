"""Runtime feature toggles.

The orchestrator only needs `is_enabled(name)`. Values live in Redis so they
can be flipped without a deploy; settings provide the defaults.
"""

import logging
from typing import Optional, Protocol

from redis import Redis
from redis.exceptions import RedisError

from ..settings import Settings, settings as default_settings

logger = logging.getLogger("grocerygen.flags")

AUTO_GENERATE_GROCERY_LISTS = "auto_generate_grocery_lists"
UPDATE_EXISTING_LISTS = "update_existing_lists"

KNOWN_FLAGS = (AUTO_GENERATE_GROCERY_LISTS, UPDATE_EXISTING_LISTS)

_TRUE = {"1", "true", "on", "yes"}
_FALSE = {"0", "false", "off", "no"}


class FeatureFlags(Protocol):
    def is_enabled(self, name: str) -> bool: ...


class StaticFeatureFlags:
    """In-memory flags. Unknown names are off."""

    def __init__(self, values: Optional[dict[str, bool]] = None):
        self.values = dict(values or {})

    def is_enabled(self, name: str) -> bool:
        return bool(self.values.get(name, False))

    def set_flag(self, name: str, enabled: bool) -> None:
        self.values[name] = enabled


def parse_flag_value(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    value = str(raw).strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


class RedisFeatureFlags:
    """Flags stored as `<prefix><name>` string keys.

    Read fresh on every call. Missing or garbage values fall back to the
    matching settings attribute (off when there is none). When Redis itself
    errors every flag reads as off, so an outage never turns a feature on.
    """

    def __init__(self, redis: Redis, settings: Settings = default_settings):
        self.redis = redis
        self.settings = settings

    def _key(self, name: str) -> str:
        return f"{self.settings.flag_key_prefix}{name}"

    def default(self, name: str) -> bool:
        return bool(getattr(self.settings, name, False))

    def is_enabled(self, name: str) -> bool:
        try:
            raw = self.redis.get(self._key(name))
        except RedisError as e:
            logger.warning(f"Flag store unavailable reading {name!r}, treating as off: {e}")
            return False

        value = parse_flag_value(raw)
        if value is None:
            if raw is not None:
                logger.warning(f"Ignoring unrecognised value {raw!r} for flag {name!r}")
            return self.default(name)
        return value

    def set_flag(self, name: str, enabled: bool) -> None:
        self.redis.set(self._key(name), "1" if enabled else "0")

    def clear_flag(self, name: str) -> None:
        self.redis.delete(self._key(name))

    def snapshot(self) -> dict[str, bool]:
        return {name: self.is_enabled(name) for name in KNOWN_FLAGS}
