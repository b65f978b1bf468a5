"""
Store service: the domain invariant engine.

Every mutation of the store graph goes through this service, whether it
comes from a script line (CommandProcessor) or an HTTP request (api.main).
The service:
1. Checks the caller's token is present
2. Resolves every referenced parent (store, aisle, shelf, product)
3. Validates counts, capacities and business rules completely
4. Only then mutates the graph

Steps 2-4 run under the registry's mutation lock, so a check and the
mutation it guards are atomic with respect to other callers. Nothing is
partially applied when an operation raises.

Business rules enforced here:
- Inventory count stays within 0..capacity
- Co-location: a customer may only move products between their basket and
  an inventory located in the aisle they are standing in
- A basket belongs to at most one customer and a customer holds at most
  one basket
- Only appliances accept commands
"""

import logging
import math
from typing import Optional, Union

from domain.exceptions import (
    DuplicateEntityError,
    InvalidArgumentError,
    NotFoundError,
    PreconditionFailedError,
    UnsupportedOperationError,
)
from domain.models import (
    Aisle,
    AisleLocation,
    Basket,
    Customer,
    CustomerType,
    Device,
    Inventory,
    InventoryLocation,
    InventoryType,
    Product,
    Shelf,
    ShelfLevel,
    StoreLocation,
    Temperature,
    classify_device_type,
    parse_enum,
)
from domain.store import Store
from services.device_bus import DeviceEvent, DeviceEventBus, MessageKind
from storage.registry import StoreRegistry

logger = logging.getLogger("store_service")


class StoreService:
    """
    Facade over the store registry.

    Example:
        service = StoreService(StoreRegistry())
        service.provision_store("S1", "Main Store", "1 Main St", token)
        service.provision_aisle("S1", "A1", "Produce", "Fresh food", "floor", token)
    """

    def __init__(
        self,
        registry: Optional[StoreRegistry] = None,
        device_bus: Optional[DeviceEventBus] = None,
    ):
        self.registry = registry or StoreRegistry()
        self.device_bus = device_bus or DeviceEventBus()

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _check_token(token: Optional[str], action: str) -> None:
        if token is None or not str(token).strip():
            raise InvalidArgumentError(action, "Token Missing")

    def _get_store(self, store_id: str, action: str) -> Store:
        store = self.registry.stores.find_by_id(store_id)
        if store is None:
            raise NotFoundError(action, f"Store Does Not Exist: {store_id}")
        return store

    def _get_product(self, product_id: str, action: str) -> Product:
        product = self.registry.products.get(product_id)
        if product is None:
            raise NotFoundError(action, f"Product Does Not Exist: {product_id}")
        return product

    def _get_inventory(self, inventory_id: str, action: str) -> Inventory:
        inventory = self.registry.find_inventory(inventory_id)
        if inventory is None:
            raise NotFoundError(action, f"Inventory Does Not Exist: {inventory_id}")
        return inventory

    def _get_customer(self, customer_id: str, action: str) -> Customer:
        customer = self.registry.customers.get(customer_id)
        if customer is None:
            raise NotFoundError(action, f"Customer Does Not Exist: {customer_id}")
        return customer

    def _get_basket(self, basket_id: str, action: str) -> Basket:
        basket = self.registry.baskets.get(basket_id)
        if basket is None:
            raise NotFoundError(action, f"Basket Does Not Exist: {basket_id}")
        return basket

    def _get_device(self, device_id: str, action: str) -> Device:
        device = self.registry.find_device(device_id)
        if device is None:
            raise NotFoundError(action, f"Device Does Not Exist: {device_id}")
        return device

    def _attach_basket_to_store(self, basket: Basket, store_id: str) -> None:
        """Move a basket's store context, keeping the store basket maps in sync."""
        if basket.store_id == store_id:
            return
        if basket.store_id is not None:
            previous = self.registry.stores.find_by_id(basket.store_id)
            if previous is not None:
                previous.remove_basket(basket)
        store = self.registry.stores.find_by_id(store_id)
        if store is None:
            basket.store_id = None
            return
        if basket.id not in store.baskets:
            store.add_basket(basket)
        basket.store_id = store_id

    # =========================================================================
    # Stores
    # =========================================================================

    def provision_store(self, store_id: str, name: str, address: str, token: str) -> Store:
        action = "Provision Store"
        self._check_token(token, action)
        with self.registry.lock:
            if self.registry.stores.exists_by_id(store_id):
                raise DuplicateEntityError(action, f"Store Already Exists: {store_id}")
            store = self.registry.stores.save(Store(id=store_id, address=address, description=name))
        logger.info(f"Provisioned store {store_id}")
        return store

    def show_store(self, store_id: str, token: str) -> Store:
        action = "Show Store"
        self._check_token(token, action)
        return self._get_store(store_id, action)

    def get_all_stores(self) -> list[Store]:
        return self.registry.all_stores()

    def update_store(
        self,
        store_id: str,
        description: Optional[str],
        address: Optional[str],
        token: str,
    ) -> Store:
        """Update description and/or address; None leaves a field untouched."""
        action = "Update Store"
        self._check_token(token, action)
        with self.registry.lock:
            store = self._get_store(store_id, action)
            if description is not None:
                store.description = description
            if address is not None:
                store.address = address
        logger.info(f"Updated store {store_id}")
        return store

    def delete_store(self, store_id: str, token: str) -> None:
        """
        Remove a store and everything it owns.

        Aisles, shelves, inventory and devices go with the store. Customers
        standing in it lose their location, and baskets lose their store
        context. Deleting an unknown (or already deleted) store raises
        NotFoundError.
        """
        action = "Delete Store"
        self._check_token(token, action)
        with self.registry.lock:
            store = self._get_store(store_id, action)
            for customer in store.customers.values():
                if customer.store_location and customer.store_location.store_id == store_id:
                    customer.store_location = None
            for basket in self.registry.baskets.values():
                if basket.store_id == store_id:
                    basket.store_id = None
            self.registry.stores.delete(store_id)
        logger.info(f"Deleted store {store_id}")

    # =========================================================================
    # Aisles and Shelves
    # =========================================================================

    def provision_aisle(
        self,
        store_id: str,
        aisle_number: str,
        name: str,
        description: str,
        location: Optional[Union[AisleLocation, str]],
        token: str,
    ) -> Aisle:
        action = "Provision Aisle"
        self._check_token(token, action)
        aisle_location = parse_enum(AisleLocation, location, action) if location is not None else None
        with self.registry.lock:
            store = self._get_store(store_id, action)
            aisle = store.add_aisle(Aisle(
                number=aisle_number,
                name=name,
                description=description or "",
                location=aisle_location,
            ))
        logger.info(f"Provisioned aisle {store_id}:{aisle_number}")
        return aisle

    def show_aisle(self, store_id: str, aisle_number: str, token: str) -> Aisle:
        action = "Show Aisle"
        self._check_token(token, action)
        return self._get_store(store_id, action).get_aisle(aisle_number)

    def provision_shelf(
        self,
        store_id: str,
        aisle_number: str,
        shelf_id: str,
        name: str,
        level: Union[ShelfLevel, str],
        description: str,
        temperature: Union[Temperature, str],
        token: str,
    ) -> Shelf:
        action = "Provision Shelf"
        self._check_token(token, action)
        shelf_level = parse_enum(ShelfLevel, level, action)
        shelf_temperature = parse_enum(Temperature, temperature, action)
        with self.registry.lock:
            aisle = self._get_store(store_id, action).get_aisle(aisle_number)
            shelf = aisle.add_shelf(Shelf(
                id=shelf_id,
                name=name,
                level=shelf_level,
                description=description or "",
                temperature=shelf_temperature,
            ))
        logger.info(f"Provisioned shelf {store_id}:{aisle_number}:{shelf_id}")
        return shelf

    def show_shelf(self, store_id: str, aisle_number: str, shelf_id: str, token: str) -> Shelf:
        action = "Show Shelf"
        self._check_token(token, action)
        return self._get_store(store_id, action).get_shelf(aisle_number, shelf_id)

    # =========================================================================
    # Products and Inventory
    # =========================================================================

    def provision_product(
        self,
        product_id: str,
        name: str,
        description: str,
        size: str,
        category: str,
        price: float,
        temperature: Union[Temperature, str],
        token: str,
    ) -> Product:
        action = "Provision Product"
        self._check_token(token, action)
        if price is None or not math.isfinite(price) or price < 0:
            raise InvalidArgumentError(action, f"Invalid Unit Price: {price}")
        product_temperature = parse_enum(Temperature, temperature, action)
        with self.registry.lock:
            if product_id in self.registry.products:
                raise DuplicateEntityError(action, f"Product Already Exists: {product_id}")
            product = Product(
                id=product_id,
                name=name,
                description=description or "",
                size=size or "",
                category=category or "",
                price=price,
                temperature=product_temperature,
            )
            self.registry.products[product_id] = product
        logger.info(f"Provisioned product {product_id}")
        return product

    def show_product(self, product_id: str, token: str) -> Product:
        action = "Show Product"
        self._check_token(token, action)
        return self._get_product(product_id, action)

    def provision_inventory(
        self,
        inventory_id: str,
        store_id: str,
        aisle_number: str,
        shelf_id: str,
        capacity: int,
        count: int,
        product_id: str,
        inventory_type: Optional[Union[InventoryType, str]],
        token: str,
    ) -> Inventory:
        action = "Provision Inventory"
        self._check_token(token, action)
        with self.registry.lock:
            store = self._get_store(store_id, action)
            store.get_shelf(aisle_number, shelf_id)

            if count is None or count < 0:
                raise InvalidArgumentError(action, f"Count Cannot Be Negative: {count}")
            if capacity is None or capacity < count:
                raise InvalidArgumentError(action, f"Capacity {capacity} Is Less Than Count {count}")
            if product_id not in self.registry.products:
                raise InvalidArgumentError(action, f"Unknown Product: {product_id}")
            resolved_type = (
                parse_enum(InventoryType, inventory_type, action)
                if inventory_type is not None
                else InventoryType.STANDARD
            )
            if self.registry.find_inventory(inventory_id) is not None:
                raise DuplicateEntityError(action, f"Inventory Already Exists: {inventory_id}")

            inventory = store.add_inventory(Inventory(
                id=inventory_id,
                location=InventoryLocation(
                    store_id=store_id, aisle_number=aisle_number, shelf_id=shelf_id
                ),
                capacity=capacity,
                count=count,
                product_id=product_id,
                type=resolved_type,
            ))
        logger.info(f"Provisioned inventory {inventory_id} at {inventory.location}")
        return inventory

    def show_inventory(self, inventory_id: str, token: str) -> Inventory:
        action = "Show Inventory"
        self._check_token(token, action)
        return self._get_inventory(inventory_id, action)

    def update_inventory(self, inventory_id: str, delta: int, token: str) -> Inventory:
        """Add delta (possibly negative) to the count, within 0..capacity."""
        action = "Update Inventory"
        self._check_token(token, action)
        with self.registry.lock:
            inventory = self._get_inventory(inventory_id, action)
            inventory.adjust(delta, action)
        logger.info(f"Inventory {inventory_id} count now {inventory.count}")
        return inventory

    # =========================================================================
    # Customers
    # =========================================================================

    def provision_customer(
        self,
        customer_id: str,
        first_name: str,
        last_name: str,
        customer_type: Union[CustomerType, str],
        email: str,
        account: str,
        token: str,
    ) -> Customer:
        action = "Provision Customer"
        self._check_token(token, action)
        resolved_type = parse_enum(CustomerType, customer_type, action)
        with self.registry.lock:
            if customer_id in self.registry.customers:
                raise DuplicateEntityError(action, f"Customer Already Exists: {customer_id}")
            customer = Customer(
                id=customer_id,
                first_name=first_name,
                last_name=last_name,
                type=resolved_type,
                email=email,
                account=account,
            )
            self.registry.customers[customer_id] = customer
        logger.info(f"Provisioned customer {customer_id}")
        return customer

    def show_customer(self, customer_id: str, token: str) -> Customer:
        action = "Show Customer"
        self._check_token(token, action)
        return self._get_customer(customer_id, action)

    def update_customer(self, customer_id: str, store_id: str, aisle_number: str, token: str) -> Customer:
        """
        Record that a customer is now standing in an aisle.

        The customer moves into the store's customer map (leaving the
        previous store's), last_seen is refreshed, and a basket they hold
        follows them to the new store.
        """
        action = "Update Customer"
        self._check_token(token, action)
        with self.registry.lock:
            customer = self._get_customer(customer_id, action)
            store = self._get_store(store_id, action)
            store.get_aisle(aisle_number)

            previous = customer.store_location
            if previous is not None and previous.store_id != store_id:
                previous_store = self.registry.stores.find_by_id(previous.store_id)
                if previous_store is not None:
                    previous_store.remove_customer(customer)
            if customer.id not in store.customers:
                store.add_customer(customer)
            customer.move_to(StoreLocation(store_id=store_id, aisle_number=aisle_number))

            if customer.basket_id is not None:
                basket = self.registry.baskets.get(customer.basket_id)
                if basket is not None:
                    self._attach_basket_to_store(basket, store_id)
        logger.info(f"Customer {customer_id} is at {customer.store_location}")
        return customer

    # =========================================================================
    # Baskets
    # =========================================================================

    def provision_basket(self, basket_id: str, token: str) -> Basket:
        action = "Provision Basket"
        self._check_token(token, action)
        with self.registry.lock:
            if basket_id in self.registry.baskets:
                raise DuplicateEntityError(action, f"Basket Already Exists: {basket_id}")
            basket = Basket(id=basket_id)
            self.registry.baskets[basket_id] = basket
        logger.info(f"Provisioned basket {basket_id}")
        return basket

    def show_basket(self, basket_id: str, token: str) -> Basket:
        action = "Show Basket"
        self._check_token(token, action)
        return self._get_basket(basket_id, action)

    def get_customer_basket(self, customer_id: str, token: str) -> Basket:
        action = "Get Customer Basket"
        self._check_token(token, action)
        customer = self._get_customer(customer_id, action)
        if customer.basket_id is None:
            raise NotFoundError(action, f"Customer {customer_id} Has No Basket")
        return self._get_basket(customer.basket_id, action)

    def assign_customer_basket(self, customer_id: str, basket_id: str, token: str) -> Basket:
        action = "Assign Customer Basket"
        self._check_token(token, action)
        with self.registry.lock:
            customer = self._get_customer(customer_id, action)
            basket = self._get_basket(basket_id, action)
            if basket.customer_id is not None and basket.customer_id != customer_id:
                raise PreconditionFailedError(
                    action, f"Basket {basket_id} Already Assigned To Customer {basket.customer_id}"
                )
            if customer.basket_id is not None and customer.basket_id != basket_id:
                raise PreconditionFailedError(
                    action, f"Customer {customer_id} Already Holds Basket {customer.basket_id}"
                )

            customer.basket_id = basket.id
            basket.customer_id = customer.id
            if customer.store_location is not None:
                self._attach_basket_to_store(basket, customer.store_location.store_id)
        logger.info(f"Assigned basket {basket_id} to customer {customer_id}")
        return basket

    def _basket_location(self, basket: Basket) -> Optional[StoreLocation]:
        """Where the basket's customer is standing, if anywhere."""
        customer = self.registry.customers.get(basket.customer_id) if basket.customer_id else None
        return customer.store_location if customer is not None else None

    @staticmethod
    def _select_inventory(candidates: list[Inventory], location: Optional[StoreLocation]) -> Inventory:
        """
        Pick the inventory backing a product.

        Candidates are ordered by inventory id; the first one in the given
        store location wins, otherwise the lowest id is returned.
        """
        if location is not None:
            for inventory in candidates:
                if inventory.location.store_location == location:
                    return inventory
        return candidates[0]

    def _resolve_inventory(
        self,
        product_id: str,
        location: Optional[StoreLocation],
        action: str,
    ) -> Inventory:
        candidates = self.registry.inventories_for_product(product_id)
        if not candidates:
            raise NotFoundError(action, f"No Inventory Holds Product {product_id}")
        return self._select_inventory(candidates, location)

    def _check_co_location(
        self,
        basket: Basket,
        inventory: Inventory,
        location: Optional[StoreLocation],
        action: str,
    ) -> None:
        if basket.customer_id is None:
            raise PreconditionFailedError(action, f"Basket {basket.id} Is Not Assigned To A Customer")
        if location is None:
            raise PreconditionFailedError(action, f"Customer {basket.customer_id} Is Not In A Store")
        if inventory.location.store_location != location:
            logger.warning(
                f"{action} rejected: customer at {location}, inventory {inventory.id} at {inventory.location}"
            )
            raise PreconditionFailedError(
                action,
                f"Customer Is In Aisle {location} But Inventory {inventory.id} Is In "
                f"{inventory.location.store_location}",
            )

    def add_basket_product(self, basket_id: str, product_id: str, quantity: int, token: str) -> Basket:
        """Move quantity units of a product from the co-located inventory into a basket."""
        action = "Add Basket Product"
        self._check_token(token, action)
        with self.registry.lock:
            basket = self._get_basket(basket_id, action)
            if quantity is None or quantity <= 0:
                raise InvalidArgumentError(action, f"Quantity Must Be Positive: {quantity}")
            location = self._basket_location(basket)
            inventory = self._resolve_inventory(product_id, location, action)
            self._check_co_location(basket, inventory, location, action)
            if quantity > inventory.count:
                raise InvalidArgumentError(
                    action,
                    f"Not Enough Inventory For Product {product_id}: requested {quantity}, "
                    f"available {inventory.count}",
                )

            inventory.adjust(-quantity, action)
            basket.add_product(product_id, quantity)
        logger.info(f"Basket {basket_id}: +{quantity} {product_id} from inventory {inventory.id}")
        return basket

    def remove_basket_product(self, basket_id: str, product_id: str, quantity: int, token: str) -> Basket:
        """Return quantity units of a product from a basket to the co-located inventory."""
        action = "Remove Basket Product"
        self._check_token(token, action)
        with self.registry.lock:
            basket = self._get_basket(basket_id, action)
            held = basket.products.get(product_id)
            if held is None:
                raise NotFoundError(action, f"Product {product_id} Not In Basket {basket_id}")
            if quantity is None or quantity <= 0 or quantity > held:
                raise InvalidArgumentError(
                    action, f"Invalid Quantity {quantity} For Product {product_id} (basket holds {held})"
                )
            location = self._basket_location(basket)
            inventory = self._resolve_inventory(product_id, location, action)
            self._check_co_location(basket, inventory, location, action)

            inventory.adjust(quantity, action)
            basket.remove_product(product_id, quantity)
        logger.info(f"Basket {basket_id}: -{quantity} {product_id} to inventory {inventory.id}")
        return basket

    def clear_basket(self, basket_id: str, token: str) -> Basket:
        """
        Empty a basket, returning stock to inventory where it can be resolved.

        Returned quantities are capped at each inventory's free capacity.
        """
        action = "Clear Basket"
        self._check_token(token, action)
        with self.registry.lock:
            basket = self._get_basket(basket_id, action)
            location = self._basket_location(basket)
            for product_id, quantity in list(basket.products.items()):
                candidates = self.registry.inventories_for_product(product_id)
                if not candidates:
                    logger.warning(f"Clear basket {basket_id}: no inventory left for {product_id}")
                    continue
                inventory = self._select_inventory(candidates, location)
                inventory.adjust(min(quantity, inventory.capacity - inventory.count), action)
            basket.products.clear()
        logger.info(f"Cleared basket {basket_id}")
        return basket

    # =========================================================================
    # Devices
    # =========================================================================

    def provision_device(
        self,
        device_id: str,
        name: str,
        device_type: str,
        store_id: str,
        aisle_number: str,
        token: str,
    ) -> Device:
        action = "Provision Device"
        self._check_token(token, action)
        kind = classify_device_type(device_type)
        with self.registry.lock:
            store = self._get_store(store_id, action)
            store.get_aisle(aisle_number)
            if self.registry.find_device(device_id) is not None:
                raise DuplicateEntityError(action, f"Device Already Exists: {device_id}")
            device = store.add_device(Device(
                id=device_id,
                name=name,
                type=device_type.strip().lower(),
                kind=kind,
                store_location=StoreLocation(store_id=store_id, aisle_number=aisle_number),
            ))
        logger.info(f"Provisioned {device.kind} {device_id} ({device.type}) at {device.store_location}")
        return device

    def show_device(self, device_id: str, token: str) -> Device:
        action = "Show Device"
        self._check_token(token, action)
        return self._get_device(device_id, action)

    def raise_event(self, device_id: str, event: str, token: str) -> DeviceEvent:
        """Publish an event reported by any device."""
        action = "Raise Event"
        self._check_token(token, action)
        device = self._get_device(device_id, action)
        message = DeviceEvent(
            device_id=device.id,
            device_type=device.type,
            kind=MessageKind.EVENT,
            message=event,
            location=str(device.store_location),
        )
        self.device_bus.publish(message)
        return message

    def issue_command(self, device_id: str, command: str, token: str) -> DeviceEvent:
        """Send a command to an appliance. Sensors cannot receive commands."""
        action = "Issue Command"
        self._check_token(token, action)
        device = self._get_device(device_id, action)
        if not device.supports_commands():
            raise UnsupportedOperationError(
                action, f"Device {device_id} Is A Sensor ({device.type}) And Cannot Receive Commands"
            )
        message = DeviceEvent(
            device_id=device.id,
            device_type=device.type,
            kind=MessageKind.COMMAND,
            message=command,
            location=str(device.store_location),
        )
        self.device_bus.publish(message)
        return message
