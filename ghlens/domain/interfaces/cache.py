"""Interface for caching mechanisms.

Defines the contract for storing, retrieving, and managing cached API
data with TTL-based expiry. Lookups are in-memory and synchronous.
"""

import abc
from typing import Any, Optional

# Import relevant domain models
from ..models.common import CacheKey, CacheStats

class CacheService(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    def get(self, key: CacheKey) -> Optional[Any]:
        """Retrieves an item from the cache.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached item if found and not expired, otherwise None.
        """
        pass

    @abc.abstractmethod
    def set(self, key: CacheKey, value: Any) -> None:
        """Stores an item, overwriting any previous entry for the key.

        Args:
            key: The cache key to store the item under.
            value: The item to store.
        """
        pass

    @abc.abstractmethod
    def delete(self, key: CacheKey) -> None:
        """Deletes an item from the cache.

        Args:
            key: The cache key to delete.
        """
        pass

    @abc.abstractmethod
    def clear(self) -> None:
        """Clears all items from the cache."""
        pass

    @abc.abstractmethod
    def stats(self) -> CacheStats:
        """Reports total, still-valid and expired entry counts."""
        pass
