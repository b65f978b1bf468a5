"""
In-memory bus for device events and commands.

Sensors and appliances raise events (a camera sees a customer, a microphone
hears a request); appliances also receive commands (a robot is told to
restock an aisle). Both travel over this bus as DeviceEvent records so any
interested component can react without the store service knowing about it.

Design decisions:
- Synchronous delivery in subscription order
- Subscriptions are per message kind ("event", "command") or "*" for all
- A failing handler is logged and does not stop the others
- Every published message is kept in an in-memory log for inspection
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

logger = logging.getLogger("device_bus")


class MessageKind:
    """Constants for device message kinds."""
    EVENT = "event"
    COMMAND = "command"


@dataclass
class DeviceEvent:
    """
    Something a device reported, or something a device was told to do.

    Attributes:
        device_id: The sensor or appliance involved
        device_type: Its type string (camera, robot, ...)
        kind: MessageKind.EVENT or MessageKind.COMMAND
        message: Free-text payload
        location: "store:aisle" of the device
    """
    device_id: str
    device_type: str
    kind: str
    message: str
    location: str
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"DeviceEvent({self.kind}, device={self.device_id}, message={self.message!r})"


DeviceEventHandler = Callable[[DeviceEvent], None]


class DeviceEventBus:
    """
    Pub/sub for device messages.

    Example usage:
        bus = DeviceEventBus()
        bus.subscribe(MessageKind.COMMAND, lambda e: print(e.message))
        bus.publish(DeviceEvent("D1", "robot", MessageKind.COMMAND, "restock", "S1:A1"))
    """

    def __init__(self):
        self._subscribers: dict[str, list[DeviceEventHandler]] = defaultdict(list)
        self._event_log: list[DeviceEvent] = []

    def subscribe(self, kind: str, handler: DeviceEventHandler) -> None:
        """Subscribe to one message kind, or "*" for every message."""
        self._subscribers[kind].append(handler)
        logger.debug(f"Subscribed handler to '{kind}' messages")

    def publish(self, event: DeviceEvent) -> int:
        """
        Deliver a message to its subscribers.

        Returns:
            Number of handlers that received the message
        """
        self._event_log.append(event)
        logger.info(f"Publishing: {event}")

        handlers = self._subscribers.get(event.kind, []) + self._subscribers.get("*", [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler raised exception for {event}: {e}")
        return len(handlers)

    def get_event_log(self) -> list[DeviceEvent]:
        return self._event_log.copy()

    def clear_event_log(self) -> None:
        self._event_log.clear()
