"""Key-value storage port."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Port for the device's persistent key-value storage."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def remove_item(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error."""
        ...
