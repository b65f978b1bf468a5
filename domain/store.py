"""
The Store aggregate.

A Store owns and indexes everything physically inside it: aisles (and
through them shelves), inventory, the customers currently in the store, the
baskets associated with it, and installed devices. Insertion enforces id
uniqueness; lookups of missing ids raise NotFoundError instead of returning
None.
"""

from pydantic import BaseModel, Field

from domain.exceptions import DuplicateEntityError, NotFoundError
from domain.models import Aisle, Basket, Customer, Device, Inventory, Shelf


class Store(BaseModel):
    """
    Store aggregate root.

    Example:
        store = Store(id="S1", address="1 Main St", description="Flagship")
        store.add_aisle(Aisle(number="A1", name="Produce"))
        store.get_aisle("A1")
    """
    id: str = Field(..., description="Unique store identifier")
    address: str
    description: str = ""
    aisles: dict[str, Aisle] = Field(default_factory=dict)
    inventory: dict[str, Inventory] = Field(default_factory=dict)
    customers: dict[str, Customer] = Field(default_factory=dict)
    baskets: dict[str, Basket] = Field(default_factory=dict)
    devices: dict[str, Device] = Field(default_factory=dict)

    # =========================================================================
    # Aisles and Shelves
    # =========================================================================

    def add_aisle(self, aisle: Aisle) -> Aisle:
        if aisle.number in self.aisles:
            raise DuplicateEntityError("Add Aisle", f"Aisle Already Exists: {self.id}:{aisle.number}")
        self.aisles[aisle.number] = aisle
        return aisle

    def get_aisle(self, aisle_number: str) -> Aisle:
        aisle = self.aisles.get(aisle_number)
        if aisle is None:
            raise NotFoundError("Get Aisle", f"Aisle Does Not Exist: {self.id}:{aisle_number}")
        return aisle

    def get_shelf(self, aisle_number: str, shelf_id: str) -> Shelf:
        return self.get_aisle(aisle_number).get_shelf(shelf_id)

    # =========================================================================
    # Inventory
    # =========================================================================

    def add_inventory(self, inventory: Inventory) -> Inventory:
        if inventory.id in self.inventory:
            raise DuplicateEntityError("Add Inventory", f"Inventory Already Exists: {inventory.id}")
        self.inventory[inventory.id] = inventory
        return inventory

    # =========================================================================
    # Customers and Baskets
    # =========================================================================

    def add_customer(self, customer: Customer) -> Customer:
        if customer.id in self.customers:
            raise DuplicateEntityError("Add Customer", f"Customer Already In Store {self.id}: {customer.id}")
        self.customers[customer.id] = customer
        return customer

    def get_customer(self, customer_id: str) -> Customer:
        customer = self.customers.get(customer_id)
        if customer is None:
            raise NotFoundError("Get Customer", f"Customer Not In Store {self.id}: {customer_id}")
        return customer

    def remove_customer(self, customer: Customer) -> None:
        """Remove a customer if present; unknown customers are ignored."""
        if self.customers.get(customer.id) is customer:
            del self.customers[customer.id]

    def add_basket(self, basket: Basket) -> Basket:
        if basket.id in self.baskets:
            raise DuplicateEntityError("Add Basket", f"Basket Already In Store {self.id}: {basket.id}")
        self.baskets[basket.id] = basket
        return basket

    def remove_basket(self, basket: Basket) -> None:
        if self.baskets.get(basket.id) is basket:
            del self.baskets[basket.id]

    # =========================================================================
    # Devices
    # =========================================================================

    def add_device(self, device: Device) -> Device:
        if device.id in self.devices:
            raise DuplicateEntityError("Add Device", f"Device Already Exists: {device.id}")
        self.devices[device.id] = device
        return device

    def __str__(self) -> str:
        return (
            f"Store {self.id} '{self.description}' at {self.address}: "
            f"aisles={len(self.aisles)} inventory={len(self.inventory)} "
            f"customers={len(self.customers)} baskets={len(self.baskets)} "
            f"devices={len(self.devices)}"
        )
