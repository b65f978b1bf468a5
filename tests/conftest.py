"""
Shared pytest fixtures for the smart store tests.

Every test gets a fresh registry, so state never leaks between tests.
"""

import io
from pathlib import Path

import pytest

from interpreter.command_processor import CommandProcessor
from services.device_bus import DeviceEventBus
from services.store_service import StoreService
from storage.data_manager import DataManager
from storage.registry import StoreRegistry


@pytest.fixture
def data_dir() -> Path:
    """Path to the sample data directory."""
    return Path(__file__).parent.parent / "data"


@pytest.fixture
def token() -> str:
    return "admin"


@pytest.fixture
def data_manager() -> DataManager:
    return DataManager()


@pytest.fixture
def registry(data_manager: DataManager) -> StoreRegistry:
    """Fresh, empty StoreRegistry for each test."""
    return StoreRegistry(data_manager)


@pytest.fixture
def device_bus() -> DeviceEventBus:
    return DeviceEventBus()


@pytest.fixture
def service(registry: StoreRegistry, device_bus: DeviceEventBus) -> StoreService:
    """StoreService over the fresh registry."""
    return StoreService(registry, device_bus)


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def err() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def processor(service: StoreService, token: str, out: io.StringIO, err: io.StringIO) -> CommandProcessor:
    """CommandProcessor writing to in-memory streams."""
    return CommandProcessor(service, token=token, out=out, err=err)


# =============================================================================
# Populated Store
# =============================================================================

@pytest.fixture
def populated(service: StoreService, token: str) -> StoreService:
    """
    A service holding one furnished store.

    Layout:
        S1:A1 (Produce) -> shelf SH1 -> inventory I1: P1 apples, 50/100
        S1:A2 (Dairy)   -> shelf SH1 -> inventory I2: P2 milk, 10/20
        Customer C1 in S1:A1 holding empty basket B1
        Customer C2 (not in a store), basket B2 unassigned
        Camera D1 in S1:A1, robot D2 in S1:A2
    """
    service.provision_store("S1", "Main Street Market", "1 Main St", token)
    service.provision_aisle("S1", "A1", "Produce", "Fruit and vegetables", "floor", token)
    service.provision_aisle("S1", "A2", "Dairy", "Milk and cheese", "floor", token)
    service.provision_shelf("S1", "A1", "SH1", "Apples", "medium", "Eye level", "ambient", token)
    service.provision_shelf("S1", "A2", "SH1", "Fridge", "low", "Chilled", "refrigerated", token)
    service.provision_product("P1", "Apple", "Green apple", "1", "fruit", 0.5, "ambient", token)
    service.provision_product("P2", "Milk", "Whole milk", "1l", "dairy", 1.25, "refrigerated", token)
    service.provision_inventory("I1", "S1", "A1", "SH1", 100, 50, "P1", "standard", token)
    service.provision_inventory("I2", "S1", "A2", "SH1", 20, 10, "P2", None, token)
    service.provision_customer("C1", "Joe", "Doe", "registered", "joe@example.com", "joe", token)
    service.provision_customer("C2", "Ann", "Lee", "guest", "ann@example.com", "ann", token)
    service.provision_basket("B1", token)
    service.provision_basket("B2", token)
    service.assign_customer_basket("C1", "B1", token)
    service.update_customer("C1", "S1", "A1", token)
    service.provision_device("D1", "Aisle camera", "camera", "S1", "A1", token)
    service.provision_device("D2", "Stock robot", "robot", "S1", "A2", token)
    return service
