"""Django ORM implementation of the Inventory repository.

Satisfies ``IInventoryRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
instead of raising; the Service Layer decides how to translate a
missing entity into an API response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F

from modules.inventory.models import InventoryItem
from modules.inventory.repositories.interfaces import IInventoryRepository

logger = structlog.get_logger(__name__)


class InventoryDjangoRepository(IInventoryRepository):
    """Concrete inventory repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[InventoryItem]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return InventoryItem.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[InventoryItem]":
        """List items with optional Django ORM look-ups, e.g. ``{"category": "Dye"}``."""
        queryset = InventoryItem.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: InventoryItem) -> InventoryItem:
        entity.save()
        logger.info(
            "inventory.saved",
            item_id=str(entity.id),
            category=entity.category,
            quantity=str(entity.quantity),
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        item = self.get_by_id(id)
        if not item:
            return False
        item.delete()
        logger.info("inventory.deleted", item_id=str(id))
        return True

    def get_by_name(self, name: str, category: str) -> Optional[InventoryItem]:
        return InventoryItem.objects.filter(
            name__iexact=name.strip(), category=category
        ).first()

    def low_stock(self) -> List[InventoryItem]:
        return list(
            InventoryItem.objects.filter(quantity__lte=F("threshold")).order_by(
                "quantity", "name"
            )
        )
