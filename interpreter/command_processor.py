"""
Command processor for smart store scripts.

Translates one command line into exactly one StoreService call and renders
the result. Whole script files are replayed line by line; a failing line is
reported on the error stream and the next line runs regardless.

Output contract:
- show commands print a human-readable rendering of the entity
- every other successful command prints a confirmation naming the id
- failures print the StoreException message

Compound ids ("S1:A1:SH1") are split here, at the boundary, so the service
only ever receives separate store/aisle/shelf arguments.
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

from domain.exceptions import CommandParseError, ScriptIOError, StoreException
from interpreter.tokenizer import ParsedCommand, parse_command, split_location
from services.store_service import StoreService

logger = logging.getLogger("command_processor")


@dataclass
class ScriptResult:
    """
    Outcome of replaying a command file.

    io_error is set (and nothing was processed) when the file could not be
    opened or is not valid UTF-8.
    """
    path: Path
    processed: int = 0
    succeeded: int = 0
    errors: list[StoreException] = field(default_factory=list)
    io_error: Optional[ScriptIOError] = None

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def parse_errors(self) -> list[CommandParseError]:
        return [e for e in self.errors if isinstance(e, CommandParseError)]


class CommandProcessor:
    """
    Interpreter for the store scripting language.

    Example usage:
        processor = CommandProcessor(StoreService(StoreRegistry()), token="admin")
        processor.execute('define store S1 name Main address "1 Main St"')
        processor.process_command_file("data/store.script")
    """

    def __init__(
        self,
        service: StoreService,
        token: str = "admin",
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.service = service
        self.token = token
        self.out = out or sys.stdout
        self.err = err or sys.stderr

        self._handlers: dict[str, Callable[[ParsedCommand], str]] = {
            "define store": self._define_store,
            "define aisle": self._define_aisle,
            "define shelf": self._define_shelf,
            "define product": self._define_product,
            "define inventory": self._define_inventory,
            "define customer": self._define_customer,
            "define basket": self._define_basket,
            "define device": self._define_device,
            "show store": self._show_store,
            "show aisle": self._show_aisle,
            "show shelf": self._show_shelf,
            "show product": self._show_product,
            "show inventory": self._show_inventory,
            "show customer": self._show_customer,
            "show basket": self._show_basket,
            "show basket_items": self._show_basket_items,
            "show device": self._show_device,
            "update store": self._update_store,
            "update inventory": self._update_inventory,
            "update customer": self._update_customer,
            "delete store": self._delete_store,
            "assign basket": self._assign_basket,
            "get_customer_basket": self._get_customer_basket,
            "add_basket_item": self._add_basket_item,
            "remove_basket_item": self._remove_basket_item,
            "clear_basket": self._clear_basket,
            "create_event": self._create_event,
            "create command": self._create_command,
        }

    # =========================================================================
    # Entry points
    # =========================================================================

    def process_command(self, line: str) -> str:
        """
        Run one command line and return its output text.

        Raises:
            CommandParseError: the line is malformed or the verb is unknown
            StoreException: the service rejected the operation
        """
        command = parse_command(line)
        handler = self._handlers.get(command.name)
        if handler is None:
            raise CommandParseError(f"Unknown command '{command.name}'", line)
        return handler(command)

    def execute(self, line: str) -> bool:
        """
        Run one command line, writing output or the error message.

        Returns True on success. Never raises StoreException.
        """
        try:
            output = self.process_command(line)
        except StoreException as e:
            logger.warning(f"{e.kind}: {e}")
            print(f"Failed: {e}", file=self.err)
            return False
        print(output, file=self.out)
        return True

    def process_command_file(self, path: Union[str, Path]) -> ScriptResult:
        """
        Replay a script file, one command per line.

        Blank lines and lines starting with '#' are skipped. A failing line
        is reported and counted; it never stops the replay. If the file
        cannot be opened or decoded the error is reported and nothing is run.
        """
        result = ScriptResult(path=Path(path))
        try:
            with open(result.path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            result.io_error = ScriptIOError(result.path, e)
            logger.error(f"Cannot read command file {result.path}: {e}")
            print(f"Failed: {result.io_error} ({e.strerror})", file=self.err)
            return result
        except UnicodeDecodeError as e:
            result.io_error = ScriptIOError(result.path, e)
            logger.error(f"Command file {result.path} is not valid UTF-8: {e}")
            print(f"Failed: {result.io_error} ({e.reason} at byte {e.start})", file=self.err)
            return result

        logger.info(f"Processing command file {result.path} ({len(lines)} lines)")
        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            result.processed += 1
            print(f"{line_number}> {line}", file=self.out)
            try:
                output = self.process_command(line)
            except StoreException as e:
                result.errors.append(e)
                logger.warning(f"Line {line_number} failed ({e.kind}): {e}")
                print(f"Failed: {e}", file=self.err)
                continue
            result.succeeded += 1
            print(output, file=self.out)

        logger.info(
            f"Finished {result.path}: {result.succeeded} succeeded, {result.failed} failed"
        )
        return result

    # =========================================================================
    # Argument helpers
    # =========================================================================

    @staticmethod
    def _target(command: ParsedCommand) -> str:
        if not command.target:
            raise CommandParseError(f"Missing id for '{command.name}'", command.line)
        return command.target

    @staticmethod
    def _arg(command: ParsedCommand, keyword: str) -> str:
        value = command.args.get(keyword)
        if value is None:
            raise CommandParseError(f"Missing '{keyword}' for '{command.name}'", command.line)
        return value

    @classmethod
    def _int_arg(cls, command: ParsedCommand, keyword: str) -> int:
        value = cls._arg(command, keyword)
        try:
            return int(value)
        except ValueError:
            raise CommandParseError(f"'{keyword}' must be an integer, got '{value}'", command.line)

    @classmethod
    def _float_arg(cls, command: ParsedCommand, keyword: str) -> float:
        value = cls._arg(command, keyword)
        try:
            return float(value)
        except ValueError:
            raise CommandParseError(f"'{keyword}' must be a number, got '{value}'", command.line)

    # =========================================================================
    # define
    # =========================================================================

    def _define_store(self, command: ParsedCommand) -> str:
        store = self.service.provision_store(
            self._target(command),
            self._arg(command, "name"),
            self._arg(command, "address"),
            self.token,
        )
        return f"Store {store.id} provisioned"

    def _define_aisle(self, command: ParsedCommand) -> str:
        store_id, aisle_number = split_location(self._target(command), 2, command.line)
        aisle = self.service.provision_aisle(
            store_id,
            aisle_number,
            self._arg(command, "name"),
            command.args.get("description", ""),
            command.args.get("location"),
            self.token,
        )
        return f"Aisle {store_id}:{aisle.number} provisioned"

    def _define_shelf(self, command: ParsedCommand) -> str:
        store_id, aisle_number, shelf_id = split_location(self._target(command), 3, command.line)
        shelf = self.service.provision_shelf(
            store_id,
            aisle_number,
            shelf_id,
            self._arg(command, "name"),
            self._arg(command, "level"),
            command.args.get("description", ""),
            self._arg(command, "temperature"),
            self.token,
        )
        return f"Shelf {store_id}:{aisle_number}:{shelf.id} provisioned"

    def _define_product(self, command: ParsedCommand) -> str:
        product = self.service.provision_product(
            self._target(command),
            self._arg(command, "name"),
            command.args.get("description", ""),
            command.args.get("size", ""),
            command.args.get("category", ""),
            self._float_arg(command, "unit_price"),
            self._arg(command, "temperature"),
            self.token,
        )
        return f"Product {product.id} provisioned"

    def _define_inventory(self, command: ParsedCommand) -> str:
        store_id, aisle_number, shelf_id = split_location(
            self._arg(command, "location"), 3, command.line
        )
        inventory = self.service.provision_inventory(
            self._target(command),
            store_id,
            aisle_number,
            shelf_id,
            self._int_arg(command, "capacity"),
            self._int_arg(command, "count"),
            self._arg(command, "product"),
            command.args.get("type"),
            self.token,
        )
        return f"Inventory {inventory.id} provisioned"

    def _define_customer(self, command: ParsedCommand) -> str:
        customer = self.service.provision_customer(
            self._target(command),
            self._arg(command, "first_name"),
            self._arg(command, "last_name"),
            self._arg(command, "type"),
            self._arg(command, "email_address"),
            self._arg(command, "account"),
            self.token,
        )
        return f"Customer {customer.id} provisioned"

    def _define_basket(self, command: ParsedCommand) -> str:
        basket = self.service.provision_basket(self._target(command), self.token)
        return f"Basket {basket.id} provisioned"

    def _define_device(self, command: ParsedCommand) -> str:
        store_id, aisle_number = split_location(self._arg(command, "location"), 2, command.line)
        device = self.service.provision_device(
            self._target(command),
            self._arg(command, "name"),
            self._arg(command, "type"),
            store_id,
            aisle_number,
            self.token,
        )
        return f"Device {device.id} provisioned as {device.kind}"

    # =========================================================================
    # show
    # =========================================================================

    def _show_store(self, command: ParsedCommand) -> str:
        return str(self.service.show_store(self._target(command), self.token))

    def _show_aisle(self, command: ParsedCommand) -> str:
        store_id, aisle_number = split_location(self._target(command), 2, command.line)
        return str(self.service.show_aisle(store_id, aisle_number, self.token))

    def _show_shelf(self, command: ParsedCommand) -> str:
        store_id, aisle_number, shelf_id = split_location(self._target(command), 3, command.line)
        return str(self.service.show_shelf(store_id, aisle_number, shelf_id, self.token))

    def _show_product(self, command: ParsedCommand) -> str:
        return str(self.service.show_product(self._target(command), self.token))

    def _show_inventory(self, command: ParsedCommand) -> str:
        return str(self.service.show_inventory(self._target(command), self.token))

    def _show_customer(self, command: ParsedCommand) -> str:
        return str(self.service.show_customer(self._target(command), self.token))

    def _show_basket(self, command: ParsedCommand) -> str:
        return str(self.service.show_basket(self._target(command), self.token))

    def _show_basket_items(self, command: ParsedCommand) -> str:
        basket = self.service.show_basket(self._target(command), self.token)
        if not basket.products:
            return f"Basket {basket.id} is empty"
        lines = [f"Basket {basket.id} items:"]
        lines.extend(f"  {product_id}: {quantity}" for product_id, quantity in sorted(basket.products.items()))
        return "\n".join(lines)

    def _show_device(self, command: ParsedCommand) -> str:
        return str(self.service.show_device(self._target(command), self.token))

    # =========================================================================
    # update / delete / assign
    # =========================================================================

    def _update_store(self, command: ParsedCommand) -> str:
        if "description" not in command.args and "address" not in command.args:
            raise CommandParseError("update store needs description or address", command.line)
        store = self.service.update_store(
            self._target(command),
            command.args.get("description"),
            command.args.get("address"),
            self.token,
        )
        return f"Store {store.id} updated"

    def _update_inventory(self, command: ParsedCommand) -> str:
        inventory = self.service.update_inventory(
            self._target(command), self._int_arg(command, "update_count"), self.token
        )
        return f"Inventory {inventory.id} updated, count {inventory.count}"

    def _update_customer(self, command: ParsedCommand) -> str:
        store_id, aisle_number = split_location(self._arg(command, "location"), 2, command.line)
        customer = self.service.update_customer(self._target(command), store_id, aisle_number, self.token)
        return f"Customer {customer.id} moved to {customer.store_location}"

    def _delete_store(self, command: ParsedCommand) -> str:
        store_id = self._target(command)
        self.service.delete_store(store_id, self.token)
        return f"Store {store_id} deleted"

    def _assign_basket(self, command: ParsedCommand) -> str:
        basket = self.service.assign_customer_basket(
            self._arg(command, "customer"), self._target(command), self.token
        )
        return f"Basket {basket.id} assigned to customer {basket.customer_id}"

    def _get_customer_basket(self, command: ParsedCommand) -> str:
        return str(self.service.get_customer_basket(self._target(command), self.token))

    # =========================================================================
    # Basket items
    # =========================================================================

    def _add_basket_item(self, command: ParsedCommand) -> str:
        product_id = self._arg(command, "product")
        quantity = self._int_arg(command, "item_count")
        basket = self.service.add_basket_product(self._target(command), product_id, quantity, self.token)
        return f"Basket {basket.id}: added {quantity} x {product_id}"

    def _remove_basket_item(self, command: ParsedCommand) -> str:
        product_id = self._arg(command, "product")
        quantity = self._int_arg(command, "item_count")
        basket = self.service.remove_basket_product(self._target(command), product_id, quantity, self.token)
        return f"Basket {basket.id}: removed {quantity} x {product_id}"

    def _clear_basket(self, command: ParsedCommand) -> str:
        basket = self.service.clear_basket(self._target(command), self.token)
        return f"Basket {basket.id} cleared"

    # =========================================================================
    # Devices
    # =========================================================================

    def _create_event(self, command: ParsedCommand) -> str:
        event = self.service.raise_event(self._target(command), self._arg(command, "event"), self.token)
        return f"Device {event.device_id} raised event: {event.message}"

    def _create_command(self, command: ParsedCommand) -> str:
        event = self.service.issue_command(self._target(command), self._arg(command, "message"), self.token)
        return f"Device {event.device_id} received command: {event.message}"
