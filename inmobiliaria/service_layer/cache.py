# inmobiliaria/service_layer/cache.py
from __future__ import annotations

import time
from typing import Any, Callable

_MISSING = object()


class TtlCache:
    """
    Small in-process key/value cache with per-entry expiry.

    One instance lives on the app (app.state.cache); tests build their own
    with a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._items: dict[str, tuple[float, Any]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        hit = self._items.get(key, _MISSING)
        if hit is _MISSING:
            return default
        expires_at, value = hit
        if self._clock() >= expires_at:
            self._items.pop(key, None)
            return default
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            self._items.pop(key, None)
            return
        self._items[key] = (self._clock() + ttl, value)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for exp, _ in self._items.values() if exp > now)
