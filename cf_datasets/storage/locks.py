"""Process-wide locks, shared by all store handles opened on the same uri."""

import threading

_LOCKS: dict[tuple[str, ...], threading.RLock] = {}
_LOCKS_LOCK = threading.Lock()


def get_lock(*key: str) -> threading.RLock:
    """Get the lock for e.g. `(store_uri, "schemas")`, created on first use"""
    with _LOCKS_LOCK:
        if key not in _LOCKS:
            _LOCKS[key] = threading.RLock()
        return _LOCKS[key]
