"""Inventory DRF serializers (read side).

Writes go through ``dtos.py`` into ``InventoryService``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.inventory.models import InventoryItem


class InventoryItemSerializer(serializers.ModelSerializer):
    """Read serializer for the inventory item resource."""

    is_low_stock = serializers.BooleanField(read_only=True)
    last_updated = serializers.DateTimeField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "name",
            "category",
            "quantity",
            "unit",
            "description",
            "threshold",
            "is_low_stock",
            "last_updated",
            "created_at",
        ]
        read_only_fields = fields
