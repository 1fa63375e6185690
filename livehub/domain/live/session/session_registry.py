"""In-memory registry of the stream keys that are currently publishing."""

import threading


class SessionRegistry:
    """Authoritative set of active stream keys.

    Keys are kept in insertion order so observers always see streams in the
    order they went live. The registry is ephemeral: it starts empty and is
    only ever rebuilt from live publish events.

    `add` and `remove` are idempotent and report whether the set changed.
    `snapshot` returns an immutable copy, never a live view.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # dict preserves insertion order; values are unused
        self._keys: dict[str, None] = {}

    def add(self, key: str) -> bool:
        """Insert key if absent.

        Args:
            key: Non-empty stream key

        Returns:
            True if the set changed, False if the key was already present
        """
        self._check_key(key)
        with self._lock:
            if key in self._keys:
                return False
            self._keys[key] = None
            return True

    def remove(self, key: str) -> bool:
        """Delete key if present.

        Args:
            key: Non-empty stream key

        Returns:
            True if the set changed, False if the key was absent
        """
        self._check_key(key)
        with self._lock:
            if key not in self._keys:
                return False
            del self._keys[key]
            return True

    def snapshot(self) -> tuple[str, ...]:
        """Return an ordered, immutable copy of the current keys."""
        with self._lock:
            return tuple(self._keys)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError(f"Stream key must be a non-empty string, got {key!r}")
