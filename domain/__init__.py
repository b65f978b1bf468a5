"""
Domain layer for the smart store.

This package contains the in-memory object graph and its error taxonomy:
- Entity records (Aisle, Shelf, Product, Inventory, Customer, Basket, Device)
- The Store aggregate that owns and indexes them
- StoreException and one subclass per failure kind
"""

from domain.exceptions import (
    StoreException,
    NotFoundError,
    DuplicateEntityError,
    InvalidArgumentError,
    PreconditionFailedError,
    UnsupportedOperationError,
    CommandParseError,
    ScriptIOError,
)
from domain.models import (
    Aisle,
    AisleLocation,
    Basket,
    Customer,
    CustomerType,
    Device,
    DeviceKind,
    Inventory,
    InventoryLocation,
    InventoryType,
    Product,
    Shelf,
    ShelfLevel,
    StoreLocation,
    Temperature,
    User,
)
from domain.store import Store

__all__ = [
    "StoreException",
    "NotFoundError",
    "DuplicateEntityError",
    "InvalidArgumentError",
    "PreconditionFailedError",
    "UnsupportedOperationError",
    "CommandParseError",
    "ScriptIOError",
    "Aisle",
    "AisleLocation",
    "Basket",
    "Customer",
    "CustomerType",
    "Device",
    "DeviceKind",
    "Inventory",
    "InventoryLocation",
    "InventoryType",
    "Product",
    "Shelf",
    "ShelfLevel",
    "StoreLocation",
    "Temperature",
    "User",
    "Store",
]
