"""
Tests for the domain models.

These tests verify enum parsing, location value types, and the record-level
rules of Inventory and Basket.
"""

import pytest

from domain.exceptions import InvalidArgumentError, NotFoundError
from domain.models import (
    Aisle,
    Basket,
    Customer,
    CustomerType,
    Device,
    DeviceKind,
    Inventory,
    InventoryLocation,
    Shelf,
    ShelfLevel,
    StoreLocation,
    Temperature,
    classify_device_type,
    parse_enum,
)


class TestEnumParsing:
    """Tests for parse_enum and classify_device_type."""

    def test_parse_enum_is_case_insensitive(self):
        """Test that enum values match regardless of case."""
        assert parse_enum(Temperature, "Frozen", "Test") == Temperature.FROZEN
        assert parse_enum(ShelfLevel, " HIGH ", "Test") == ShelfLevel.HIGH

    def test_parse_enum_accepts_member(self):
        assert parse_enum(CustomerType, CustomerType.GUEST, "Test") is CustomerType.GUEST

    def test_parse_enum_rejects_unknown_value(self):
        """Test that an unknown value raises InvalidArgumentError naming the action."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_enum(Temperature, "lukewarm", "Provision Shelf")

        assert exc_info.value.action == "Provision Shelf"
        assert "lukewarm" in str(exc_info.value)

    def test_classify_sensor_and_appliance(self):
        assert classify_device_type("camera") == DeviceKind.SENSOR
        assert classify_device_type("Microphone") == DeviceKind.SENSOR
        assert classify_device_type("robot") == DeviceKind.APPLIANCE
        assert classify_device_type("turnstile") == DeviceKind.APPLIANCE

    def test_classify_unknown_device_type(self):
        with pytest.raises(InvalidArgumentError):
            classify_device_type("toaster")


class TestLocations:
    """Tests for the location value types."""

    def test_store_location_equality_and_str(self):
        """Test that locations compare by value."""
        a = StoreLocation(store_id="S1", aisle_number="A1")
        b = StoreLocation(store_id="S1", aisle_number="A1")

        assert a == b
        assert hash(a) == hash(b)
        assert str(a) == "S1:A1"

    def test_inventory_location_projects_store_location(self):
        location = InventoryLocation(store_id="S1", aisle_number="A1", shelf_id="SH1")

        assert location.store_location == StoreLocation(store_id="S1", aisle_number="A1")
        assert str(location) == "S1:A1:SH1"

    def test_locations_are_frozen(self):
        location = StoreLocation(store_id="S1", aisle_number="A1")
        with pytest.raises(Exception):
            location.store_id = "S2"


class TestAisle:
    """Tests for shelves within an aisle."""

    def test_get_missing_shelf_raises(self):
        aisle = Aisle(number="A1", name="Produce")
        with pytest.raises(NotFoundError):
            aisle.get_shelf("SH9")

    def test_add_and_get_shelf(self):
        aisle = Aisle(number="A1", name="Produce")
        shelf = aisle.add_shelf(Shelf(id="SH1", name="Top", level=ShelfLevel.HIGH))

        assert aisle.get_shelf("SH1") is shelf
        assert shelf.temperature == "ambient"


class TestInventory:
    """Tests for Inventory.adjust bounds."""

    @pytest.fixture
    def inventory(self) -> Inventory:
        return Inventory(
            id="I1",
            location=InventoryLocation(store_id="S1", aisle_number="A1", shelf_id="SH1"),
            capacity=10,
            count=5,
            product_id="P1",
        )

    def test_adjust_within_bounds(self, inventory: Inventory):
        assert inventory.adjust(5) == 10
        assert inventory.adjust(-10) == 0

    def test_adjust_below_zero_leaves_count_unchanged(self, inventory: Inventory):
        """Test that a rejected change does not touch the count."""
        with pytest.raises(InvalidArgumentError):
            inventory.adjust(-6)
        assert inventory.count == 5

    def test_adjust_over_capacity_leaves_count_unchanged(self, inventory: Inventory):
        with pytest.raises(InvalidArgumentError):
            inventory.adjust(6)
        assert inventory.count == 5

    def test_default_type_is_standard(self, inventory: Inventory):
        assert inventory.type == "standard"


class TestBasket:
    """Tests for basket product lines."""

    def test_add_accumulates(self):
        basket = Basket(id="B1")
        basket.add_product("P1", 2)
        basket.add_product("P1", 3)

        assert basket.products == {"P1": 5}
        assert basket.item_count() == 5

    def test_remove_to_zero_drops_line(self):
        """Test that a line reaching zero is removed, not kept at 0."""
        basket = Basket(id="B1", products={"P1": 2})
        assert basket.remove_product("P1", 2) == 0
        assert "P1" not in basket.products

    def test_remove_more_than_held(self):
        basket = Basket(id="B1", products={"P1": 2})
        with pytest.raises(InvalidArgumentError):
            basket.remove_product("P1", 3)
        assert basket.products == {"P1": 2}

    def test_remove_absent_product(self):
        with pytest.raises(NotFoundError):
            Basket(id="B1").remove_product("P1", 1)

    def test_add_non_positive_quantity(self):
        with pytest.raises(InvalidArgumentError):
            Basket(id="B1").add_product("P1", 0)


class TestCustomerAndDevice:
    """Tests for Customer movement and Device capabilities."""

    def test_move_to_sets_last_seen(self):
        customer = Customer(
            id="C1", first_name="Joe", last_name="Doe", type="guest",
            email="joe@example.com", account="joe",
        )
        assert customer.last_seen is None

        customer.move_to(StoreLocation(store_id="S1", aisle_number="A1"))

        assert str(customer.store_location) == "S1:A1"
        assert customer.last_seen is not None

    def test_only_appliances_support_commands(self):
        location = StoreLocation(store_id="S1", aisle_number="A1")
        camera = Device(id="D1", name="Cam", type="camera", kind=DeviceKind.SENSOR, store_location=location)
        robot = Device(id="D2", name="Bot", type="robot", kind=DeviceKind.APPLIANCE, store_location=location)

        assert not camera.supports_commands()
        assert robot.supports_commands()
        assert "sensor" in str(camera)
