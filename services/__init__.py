"""
Service layer for the smart store.

- StoreService: provision/show/update/delete for every entity plus the
  cross-entity basket and device operations
- AuthenticationService: API user management and Basic auth
- DeviceEventBus: where device events and commands are published
"""

from services.authentication import AuthenticationService
from services.device_bus import DeviceEvent, DeviceEventBus, MessageKind
from services.store_service import StoreService

__all__ = [
    "AuthenticationService",
    "DeviceEvent",
    "DeviceEventBus",
    "MessageKind",
    "StoreService",
]
