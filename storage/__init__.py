"""
Storage layer for the smart store.

- DataManager: thread-safe key-value façade
- StoreRepository / UserRepository: typed access to the "stores" and
  "users" maps
- StoreRegistry: the explicitly constructed home of the object graph
"""

from storage.data_manager import DataManager
from storage.repositories import StoreRepository, UserRepository
from storage.registry import StoreRegistry

__all__ = [
    "DataManager",
    "StoreRepository",
    "UserRepository",
    "StoreRegistry",
]
