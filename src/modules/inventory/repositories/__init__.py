from modules.inventory.repositories.django_repository import InventoryDjangoRepository
from modules.inventory.repositories.interfaces import IInventoryRepository

__all__ = ["IInventoryRepository", "InventoryDjangoRepository"]
