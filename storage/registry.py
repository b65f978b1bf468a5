"""
Store registry: the single in-memory home of the object graph.

The registry is constructed explicitly and handed to the StoreService (and
to test fixtures), never reached through a global. It keeps:
- the Store aggregates (through StoreRepository)
- the product catalog, customers and baskets, which exist independently
  of any store
- one re-entrant mutation lock that service operations hold across their
  check-then-mutate sequences

Inventory and devices live inside their Store; the registry finds them by
scanning the registered stores, so anything owned by a deleted store
disappears from lookups with it.
"""

import logging
import threading
from typing import Optional

from domain.models import Basket, Customer, Device, Inventory, Product
from domain.store import Store
from storage.data_manager import DataManager
from storage.repositories import StoreRepository

logger = logging.getLogger("registry")

PRODUCTS_KEY = "products"
CUSTOMERS_KEY = "customers"
BASKETS_KEY = "baskets"


class StoreRegistry:
    """
    Registry of stores and store-independent entities.

    Example:
        registry = StoreRegistry()
        service = StoreService(registry)
        ...
        registry.reset()   # drop everything, e.g. between tests
    """

    def __init__(self, data_manager: Optional[DataManager] = None):
        self.data_manager = data_manager or DataManager()
        self.lock = threading.RLock()
        self.stores = StoreRepository(self.data_manager)

    # =========================================================================
    # Top-level maps
    # =========================================================================

    @property
    def products(self) -> dict[str, Product]:
        return self.data_manager.setdefault(PRODUCTS_KEY, dict)

    @property
    def customers(self) -> dict[str, Customer]:
        return self.data_manager.setdefault(CUSTOMERS_KEY, dict)

    @property
    def baskets(self) -> dict[str, Basket]:
        return self.data_manager.setdefault(BASKETS_KEY, dict)

    # =========================================================================
    # Lookups across stores
    # =========================================================================

    def all_stores(self) -> list[Store]:
        return list(self.stores.find_all().values())

    def find_inventory(self, inventory_id: str) -> Optional[Inventory]:
        for store in self.all_stores():
            inventory = store.inventory.get(inventory_id)
            if inventory is not None:
                return inventory
        return None

    def inventories_for_product(self, product_id: str) -> list[Inventory]:
        """All inventory records holding a product, ordered by inventory id."""
        matches = [
            inventory
            for store in self.all_stores()
            for inventory in store.inventory.values()
            if inventory.product_id == product_id
        ]
        return sorted(matches, key=lambda inventory: inventory.id)

    def find_device(self, device_id: str) -> Optional[Device]:
        for store in self.all_stores():
            device = store.devices.get(device_id)
            if device is not None:
                return device
        return None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset(self) -> None:
        """Drop every store, product, customer and basket."""
        with self.lock:
            self.data_manager.clear()
            self.stores = StoreRepository(self.data_manager)
        logger.info("Registry reset")
