"""
In-memory TTL cache for recipe API responses.
"""

import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from shared.logging import get_logger


DEFAULT_TTL = 300.0
KEY_PARAMS_SEPARATOR = "::"
PARAM_SEPARATOR = "|"

_MISSING = object()


def _escape(part: Any) -> str:
    """Backslash-escape separator characters so rendered params stay unambiguous."""
    return str(part).replace("\\", "\\\\").replace("|", "\\|").replace(":", "\\:")


def _normalize_key(key: Any) -> Any:
    """Unhashable keys are stored under their ``repr``."""
    try:
        hash(key)
    except TypeError:
        return repr(key)
    return key


class TTLCache:
    """Key/value store with per-entry expiry and prefix invalidation.

    Expiry is evaluated lazily: a stale entry is treated as absent by every
    read and removed by the first read that notices it. There is no
    background sweeper. Each entry is stored as a single ``(value, expires_at)``
    tuple so the two halves are always written and removed together.

    ``max_entries`` is unset by default, which leaves the store unbounded.
    When set, inserting a new key into a full store first drops expired
    entries and then the least recently used ones.

    No operation raises: keys and values are opaque to the store.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        *,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self.logger = get_logger("recipes.cache")

    @staticmethod
    def generate_key(prefix: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Derive a canonical cache key from a namespace prefix and query params.

        Parameter names are sorted so insertion order never matters, e.g.
        ``generate_key("recipes", {"page": 1, "category": "makanan"})`` gives
        ``"recipes::category:makanan|page:1"``. Without params the prefix is
        returned unchanged.
        """
        if not params:
            return prefix
        rendered = PARAM_SEPARATOR.join(
            f"{_escape(name)}:{_escape(params[name])}" for name in sorted(params, key=str)
        )
        return f"{prefix}{KEY_PARAMS_SEPARATOR}{rendered}"

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds, overwriting any entry.

        A zero or negative TTL is accepted and produces an entry that is
        already stale.
        """
        if ttl is None:
            ttl = self.default_ttl
        key = _normalize_key(key)
        now = self._clock()

        if key in self._entries:
            self._entries.move_to_end(key)
        elif self.max_entries is not None and len(self._entries) >= self.max_entries:
            self._make_room(now)

        self._entries[key] = (value, now + ttl)
        self.logger.debug("Cached value", key=key, ttl=ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` if it has not expired, else ``default``."""
        key = _normalize_key(key)
        entry = self._entries.get(key)
        if entry is None:
            return default

        value, expires_at = entry
        if self._clock() < expires_at:
            self._entries.move_to_end(key)
            return value

        del self._entries[key]
        self.logger.debug("Evicted expired entry", key=key)
        return default

    def has(self, key: str) -> bool:
        """Check whether ``key`` holds a live entry (evicting it if stale).

        Prefer a single ``get`` over ``has`` followed by ``get``: the entry can
        expire or be invalidated in between.
        """
        return self.get(key, _MISSING) is not _MISSING

    def invalidate(self, key: str) -> None:
        """Remove ``key``; a no-op when absent."""
        self._entries.pop(_normalize_key(key), None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every stored key starting with ``prefix``.

        Scans the whole key set, expired entries included. Returns the number
        of removed entries; a non-string prefix matches nothing.
        """
        if not isinstance(prefix, str):
            return 0
        doomed = [key for key in self._entries if isinstance(key, str) and key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]

        self.logger.debug("Invalidated cache prefix", prefix=prefix, removed=len(doomed))
        return len(doomed)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def get_stats(self) -> Dict[str, int]:
        """Snapshot of ``total``, ``valid`` and ``expired`` entry counts.

        Expiry is evaluated at call time but nothing is evicted, so expired
        entries that no read has touched yet are still counted in ``total``.
        """
        now = self._clock()
        valid = sum(1 for _, expires_at in self._entries.values() if now < expires_at)
        return {
            "total": len(self._entries),
            "valid": valid,
            "expired": len(self._entries) - valid,
        }

    def _make_room(self, now: float) -> None:
        """Purge expired entries, then least recently used ones, below capacity."""
        for key in [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]:
            del self._entries[key]

        while self._entries and len(self._entries) >= self.max_entries:
            key, _ = self._entries.popitem(last=False)
            self.logger.debug("Evicted least recently used entry", key=key)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)
