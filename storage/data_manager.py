"""
In-memory key-value data manager.

This is the persistence façade the repositories sit on. It holds the
top-level maps of the application ("stores", "users", "products", ...)
under string keys for the lifetime of the process.

Design decisions:
- No durability: data lives as long as the instance
- Explicitly constructed and injected; there is no global instance
- All access goes through one re-entrant lock so REST request threads can
  share an instance safely
"""

import threading
from typing import Any, Optional


class DataManager:
    """
    Thread-safe key-value store.

    Example usage:
        manager = DataManager()
        manager.put("stores", {})
        stores = manager.get("stores")
    """

    def __init__(self):
        self._data: dict[str, Any] = {}
        self._lock = threading.RLock()

    def put(self, key: str, value: Any) -> None:
        """Store a value under a key, replacing any previous value."""
        with self._lock:
            self._data[key] = value

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return the value stored under key, or default."""
        with self._lock:
            return self._data.get(key, default)

    def setdefault(self, key: str, factory) -> Any:
        """Return the value under key, storing factory() first if absent."""
        with self._lock:
            if key not in self._data:
                self._data[key] = factory()
            return self._data[key]

    def contains_key(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def remove(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data.keys())

    def size(self) -> int:
        with self._lock:
            return len(self._data)
