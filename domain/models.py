"""
Domain models for the smart store.

These models describe the physical store that the command processor and the
REST API mutate: aisles and shelves, the product catalog, inventory placed
on shelves, customers walking the floor with baskets, and the sensors and
appliances installed in aisles.

Design decisions:
- Using Pydantic for validation and serialization
- Records are mutable; the service layer owns every mutation
- Customer <-> Basket ownership is held by id on both sides, so the object
  graph has no cycles and records can be dumped and compared safely
- Location value types are frozen (hashable, compared by value)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.exceptions import (
    DuplicateEntityError,
    InvalidArgumentError,
    NotFoundError,
)


# =============================================================================
# Enums
# =============================================================================

class AisleLocation(str, Enum):
    """Where an aisle physically sits."""
    FLOOR = "floor"
    STORE_ROOM = "store_room"


class ShelfLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Temperature(str, Enum):
    """Storage temperature of a shelf or a product."""
    FROZEN = "frozen"
    REFRIGERATED = "refrigerated"
    AMBIENT = "ambient"
    WARM = "warm"
    HOT = "hot"


class InventoryType(str, Enum):
    STANDARD = "standard"
    FLEXIBLE = "flexible"


class CustomerType(str, Enum):
    GUEST = "guest"
    REGISTERED = "registered"


class CustomerAgeGroup(str, Enum):
    ADULT = "adult"
    CHILD = "child"
    SENIOR = "senior"


class SensorType(str, Enum):
    """Passive devices: they only raise events."""
    MICROPHONE = "microphone"
    CAMERA = "camera"


class ApplianceType(str, Enum):
    """Active devices: they raise events and accept commands."""
    SPEAKER = "speaker"
    ROBOT = "robot"
    TURNSTILE = "turnstile"


class DeviceKind(str, Enum):
    SENSOR = "sensor"
    APPLIANCE = "appliance"


def parse_enum(enum_cls: type[Enum], value: str, action: str) -> Enum:
    """
    Resolve a case-insensitive enum value.

    Raises InvalidArgumentError listing the accepted values when the value
    is not a member.
    """
    if isinstance(value, enum_cls):
        return value
    normalized = str(value).strip().lower()
    for member in enum_cls:
        if member.value == normalized:
            return member
    accepted = "|".join(m.value for m in enum_cls)
    raise InvalidArgumentError(action, f"Invalid {enum_cls.__name__} '{value}' (expected {accepted})")


def classify_device_type(device_type: str) -> DeviceKind:
    """Map a device type string onto its capability variant."""
    normalized = device_type.strip().lower()
    if normalized in {t.value for t in SensorType}:
        return DeviceKind.SENSOR
    if normalized in {t.value for t in ApplianceType}:
        return DeviceKind.APPLIANCE
    raise InvalidArgumentError("Provision Device", f"Unknown Device Type '{device_type}'")


# =============================================================================
# Location Value Types
# =============================================================================

class StoreLocation(BaseModel):
    """A position inside a store: which store, which aisle."""
    store_id: str
    aisle_number: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.store_id}:{self.aisle_number}"


class InventoryLocation(BaseModel):
    """Where an inventory record sits: store, aisle and shelf."""
    store_id: str
    aisle_number: str
    shelf_id: str

    model_config = ConfigDict(frozen=True)

    @property
    def store_location(self) -> StoreLocation:
        return StoreLocation(store_id=self.store_id, aisle_number=self.aisle_number)

    def __str__(self) -> str:
        return f"{self.store_id}:{self.aisle_number}:{self.shelf_id}"


# =============================================================================
# Store Layout
# =============================================================================

class Shelf(BaseModel):
    id: str = Field(..., description="Shelf identifier, unique within its aisle")
    name: str
    level: ShelfLevel
    description: str = ""
    temperature: Temperature = Temperature.AMBIENT

    model_config = ConfigDict(use_enum_values=True)

    def __str__(self) -> str:
        return (
            f"Shelf {self.id} '{self.name}' level={self.level} "
            f"temperature={self.temperature} - {self.description}"
        )


class Aisle(BaseModel):
    """
    An aisle of a store. Owns its shelves.

    Shelf ids are unique within the aisle; adding a duplicate or looking up
    a missing shelf raises.
    """
    number: str = Field(..., description="Aisle number, unique within its store")
    name: str
    description: str = ""
    location: Optional[AisleLocation] = None
    shelves: dict[str, Shelf] = Field(default_factory=dict)

    model_config = ConfigDict(use_enum_values=True)

    def add_shelf(self, shelf: Shelf) -> Shelf:
        if shelf.id in self.shelves:
            raise DuplicateEntityError("Add Shelf", f"Shelf Already Exists: {self.number}:{shelf.id}")
        self.shelves[shelf.id] = shelf
        return shelf

    def get_shelf(self, shelf_id: str) -> Shelf:
        shelf = self.shelves.get(shelf_id)
        if shelf is None:
            raise NotFoundError("Get Shelf", f"Shelf Does Not Exist: {self.number}:{shelf_id}")
        return shelf

    def __str__(self) -> str:
        location = self.location or "unspecified"
        return (
            f"Aisle {self.number} '{self.name}' location={location} "
            f"shelves={sorted(self.shelves)} - {self.description}"
        )


# =============================================================================
# Catalog and Inventory
# =============================================================================

class Product(BaseModel):
    """Product entity from the catalog. Ids are unique across all stores."""
    id: str = Field(..., description="Unique product identifier (SKU)")
    name: str
    description: str = ""
    size: str = ""
    category: str = ""
    price: float = Field(..., ge=0, description="Unit price")
    temperature: Temperature = Temperature.AMBIENT

    model_config = ConfigDict(use_enum_values=True)

    def __str__(self) -> str:
        return (
            f"Product {self.id} '{self.name}' size={self.size} category={self.category} "
            f"price={self.price:.2f} temperature={self.temperature} - {self.description}"
        )


class Inventory(BaseModel):
    """
    Stock of one product held on one shelf.

    Invariant: 0 <= count <= capacity. adjust() checks the whole change
    before touching count, so a rejected change leaves the record intact.
    """
    id: str = Field(..., description="Unique inventory identifier")
    location: InventoryLocation
    capacity: int = Field(..., ge=0)
    count: int = Field(..., ge=0)
    product_id: str
    type: InventoryType = InventoryType.STANDARD

    model_config = ConfigDict(use_enum_values=True)

    def adjust(self, delta: int, action: str = "Update Inventory") -> int:
        new_count = self.count + delta
        if new_count < 0:
            raise InvalidArgumentError(
                action, f"Inventory {self.id} Count Cannot Be Negative ({self.count}{delta:+d})"
            )
        if new_count > self.capacity:
            raise InvalidArgumentError(
                action,
                f"Inventory {self.id} Count Exceeds Capacity ({self.count}{delta:+d} > {self.capacity})",
            )
        self.count = new_count
        return new_count

    def __str__(self) -> str:
        return (
            f"Inventory {self.id} at {self.location} product={self.product_id} "
            f"count={self.count}/{self.capacity} type={self.type}"
        )


# =============================================================================
# Customers and Baskets
# =============================================================================

class Customer(BaseModel):
    """
    A shopper. May be located in an aisle and may hold one basket.
    """
    id: str = Field(..., description="Unique customer identifier")
    first_name: str
    last_name: str
    type: CustomerType
    email: str
    account: str = Field(..., description="Account (wallet) address")
    age_group: Optional[CustomerAgeGroup] = None
    store_location: Optional[StoreLocation] = None
    last_seen: Optional[datetime] = None
    basket_id: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

    def move_to(self, location: StoreLocation) -> None:
        self.store_location = location
        self.last_seen = datetime.now(timezone.utc)

    def __str__(self) -> str:
        location = self.store_location or "not in store"
        return (
            f"Customer {self.id} {self.first_name} {self.last_name} type={self.type} "
            f"email={self.email} account={self.account} location={location} "
            f"basket={self.basket_id or '-'}"
        )


class Basket(BaseModel):
    """
    Shopping basket: product id -> quantity.

    Quantities are always positive; a line that drops to zero is removed.
    """
    id: str = Field(..., description="Unique basket identifier")
    customer_id: Optional[str] = None
    store_id: Optional[str] = None
    products: dict[str, int] = Field(default_factory=dict)

    def add_product(self, product_id: str, quantity: int) -> int:
        if quantity <= 0:
            raise InvalidArgumentError("Add Basket Product", f"Quantity Must Be Positive: {quantity}")
        self.products[product_id] = self.products.get(product_id, 0) + quantity
        return self.products[product_id]

    def remove_product(self, product_id: str, quantity: int) -> int:
        held = self.products.get(product_id)
        if held is None:
            raise NotFoundError("Remove Basket Product", f"Product {product_id} Not In Basket {self.id}")
        if quantity <= 0 or quantity > held:
            raise InvalidArgumentError(
                "Remove Basket Product",
                f"Invalid Quantity {quantity} For Product {product_id} (basket holds {held})",
            )
        remaining = held - quantity
        if remaining == 0:
            del self.products[product_id]
        else:
            self.products[product_id] = remaining
        return remaining

    def item_count(self) -> int:
        return sum(self.products.values())

    def __str__(self) -> str:
        items = ", ".join(f"{pid} x{qty}" for pid, qty in sorted(self.products.items())) or "empty"
        return (
            f"Basket {self.id} customer={self.customer_id or '-'} "
            f"store={self.store_id or '-'} items=[{items}]"
        )


# =============================================================================
# Devices
# =============================================================================

class Device(BaseModel):
    """
    A sensor or appliance installed in an aisle.

    The type string determines the capability variant; only appliances
    accept commands.
    """
    id: str = Field(..., description="Unique device identifier")
    name: str
    type: str = Field(..., description="Device type, e.g. camera or robot")
    kind: DeviceKind
    store_location: StoreLocation

    model_config = ConfigDict(use_enum_values=True)

    def supports_commands(self) -> bool:
        return self.kind == DeviceKind.APPLIANCE

    def __str__(self) -> str:
        return f"Device {self.id} '{self.name}' type={self.type} ({self.kind}) at {self.store_location}"


# =============================================================================
# Users (REST API accounts)
# =============================================================================

class User(BaseModel):
    """An API account, keyed by email."""
    email: str
    password: str
    name: str
