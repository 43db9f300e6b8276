"""Inventory domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class InventoryItemAlreadyExists(Exception):
    """An item with the same name already exists in the category."""


class InventoryItemNotFound(Exception):
    """The requested inventory item does not exist."""
