"""Inventory URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.inventory.views import InventoryItemViewSet

router = DefaultRouter(trailing_slash=True)
router.register("inventory", InventoryItemViewSet, basename="inventory")

urlpatterns = router.urls
