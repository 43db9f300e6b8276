"""Inventory service layer (Use Cases).

Orchestrates business logic for inventory items, delegating
persistence to the injected ``IInventoryRepository``.

Business rules enforced here:
- An item name is unique within its category (case-insensitive).
- Quantity and threshold are non-negative (validated by DTO).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import models, transaction

from modules.inventory.exceptions import (
    InventoryItemAlreadyExists,
    InventoryItemNotFound,
)
from modules.inventory.models import InventoryItem

if TYPE_CHECKING:
    from modules.inventory.dtos import CreateInventoryItemDTO, UpdateInventoryItemDTO
    from modules.inventory.repositories.interfaces import IInventoryRepository

logger = structlog.get_logger(__name__)


class InventoryService:
    """Application service for inventory use-cases.

    Receives an ``IInventoryRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IInventoryRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_item(self, dto: CreateInventoryItemDTO) -> InventoryItem:
        """Create a new inventory item.

        Raises:
            InventoryItemAlreadyExists: the name is taken in that category.
        """
        log = logger.bind(name=dto.name, category=str(dto.category))

        if self._repo.get_by_name(dto.name, dto.category):
            log.warning("inventory.duplicate_name")
            raise InventoryItemAlreadyExists(
                f"'{dto.name}' already exists in {dto.category}."
            )

        item = InventoryItem(
            name=dto.name,
            category=dto.category,
            quantity=dto.quantity,
            unit=dto.unit,
            description=dto.description,
            threshold=dto.threshold,
        )
        item = self._repo.save(item)
        log.info("inventory.created", item_id=str(item.id), low_stock=item.is_low_stock)
        return item

    @transaction.atomic
    def update_item(self, id: str, dto: UpdateInventoryItemDTO) -> InventoryItem:
        """Update an existing item with the supplied fields.

        Raises:
            InventoryItemNotFound: the item does not exist.
            InventoryItemAlreadyExists: the new name/category pair is taken.
        """
        item = self._repo.get_by_id(id)
        if not item:
            raise InventoryItemNotFound(f"Inventory item {id} not found.")

        log = logger.bind(item_id=str(id))
        changes = dto.changes()

        name = changes.get("name", item.name)
        category = changes.get("category", item.category)
        if "name" in changes or "category" in changes:
            existing = self._repo.get_by_name(name, category)
            if existing and existing.id != item.id:
                log.warning("inventory.duplicate_name", name=name, category=str(category))
                raise InventoryItemAlreadyExists(f"'{name}' already exists in {category}.")

        was_low = item.is_low_stock
        for field, value in changes.items():
            setattr(item, field, value)

        item = self._repo.save(item)
        log.info("inventory.updated", fields=sorted(changes))
        if item.is_low_stock and not was_low:
            log.warning(
                "inventory.low_stock",
                quantity=str(item.quantity),
                threshold=str(item.threshold),
            )
        return item

    @transaction.atomic
    def delete_item(self, id: str) -> None:
        """Raises ``InventoryItemNotFound`` if the item does not exist."""
        if not self._repo.delete(id):
            raise InventoryItemNotFound(f"Inventory item {id} not found.")
        logger.info("inventory.removed", item_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_items(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[InventoryItem]":
        return self._repo.list(filters)

    def get_item(self, id: str) -> InventoryItem:
        """Raises ``InventoryItemNotFound`` if the item does not exist."""
        item = self._repo.get_by_id(id)
        if not item:
            raise InventoryItemNotFound(f"Inventory item {id} not found.")
        return item

    def low_stock_items(self) -> List[InventoryItem]:
        """Items at or below their reorder threshold, scarcest first."""
        return self._repo.low_stock()
