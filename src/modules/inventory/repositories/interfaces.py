"""Inventory repository interface.

Extends ``IRepository[InventoryItem]`` with the look-ups required by
the uniqueness rule (name per category) and low-stock reporting.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.inventory.models import InventoryItem


class IInventoryRepository(IRepository["InventoryItem"]):
    """Repository contract for inventory items."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[InventoryItem]":
        """List items with optional filters (a QuerySet, so filter backends apply)."""

    @abstractmethod
    def get_by_name(self, name: str, category: str) -> Optional[InventoryItem]:
        """Retrieve an item by case-insensitive name within a category."""

    @abstractmethod
    def low_stock(self) -> List[InventoryItem]:
        """Items whose quantity is at or below their threshold."""
