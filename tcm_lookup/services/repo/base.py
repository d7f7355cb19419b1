from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ItemRepo(ABC):
    """Persistent item store: point lookup by normalized name, insert-if-absent by ItemID."""

    @abstractmethod
    def find_by_name(self, name_lowercase: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def insert(self, record: Dict[str, Any]) -> None:
        """Store ``record``; raise ItemExistsError if its ItemID is already present."""
