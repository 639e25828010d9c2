from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple


class VersionedValue(NamedTuple):
    value: str
    version: int


class KeyValueStore(ABC):
    """String key-value store with set values and versioned documents.

    Versions start at 1 on first write and grow by one on every write to the key.
    Implementations raise ``StorageError`` on backend failures.
    """

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def get_versioned(self, key: str) -> VersionedValue | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def compare_and_set(self, key: str, value: str, expected_version: int) -> bool:
        """Write only if the stored version equals ``expected_version``.

        ``expected_version=0`` means "only if the key does not exist yet".
        Returns False when the condition does not hold.
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def add_to_set(self, key: str, member: str) -> None: ...

    @abstractmethod
    def remove_from_set(self, key: str, member: str) -> None: ...

    @abstractmethod
    def members_of(self, key: str) -> set[str]: ...
