"""Short-lived memory of the last known switch-button states."""

import time
from typing import Callable, Dict, Optional, Tuple

from constants import DEFAULT_STATE_CACHE_SECONDS


class StateCache:
    """
    Keyed store of (device_id, button) -> state with per-entry expiry.

    Only used to skip commands a button already satisfies; an expired or
    missing entry means "unknown" and never equals a target state.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_STATE_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Tuple[str, str], Tuple[str, float]] = {}

    def get(self, device_id: str, button_name: str) -> Optional[str]:
        """Get cached state, None if absent or expired."""
        key = (device_id, button_name)
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, device_id: str, button_name: str, value: str, ttl_seconds: Optional[float] = None):
        """Remember a state for ``ttl_seconds`` (cache default if omitted)."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[(device_id, button_name)] = (value, self._clock() + ttl)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for _, expires_at in self._entries.values() if expires_at > now)
