"""In-memory key-value store."""

import asyncio


class InMemoryKeyValueStore:
    """Volatile store, used when no storage file is configured and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get_item(self, key: str) -> str | None:
        async with self._lock:
            return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the stored data."""
        return dict(self._data)
