"""Abstract base class for read-only repositories following the Repository Pattern."""

from abc import ABC, abstractmethod
from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """
    Generic read-only repository interface.

    Entities are produced lazily; iterating twice reads the source twice.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[T]:
        """Iterate over all entities."""
        pass

    @abstractmethod
    def get(self, id: str) -> Optional[T]:
        """Retrieve an entity by ID."""
        pass

    def list(self) -> List[T]:
        """List all entities."""
        return list(iter(self))
