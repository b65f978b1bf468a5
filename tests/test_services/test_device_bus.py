"""
Tests for the device event bus.

These tests verify the pub/sub mechanism that carries sensor events and
appliance commands.
"""

import pytest

from services.device_bus import DeviceEvent, DeviceEventBus, MessageKind


def make_event(kind: str = MessageKind.EVENT, message: str = "motion") -> DeviceEvent:
    return DeviceEvent(
        device_id="D1",
        device_type="camera",
        kind=kind,
        message=message,
        location="S1:A1",
    )


class TestDeviceEvent:
    """Tests for DeviceEvent."""

    def test_event_ids_are_unique(self):
        assert make_event().event_id != make_event().event_id

    def test_event_str(self):
        text = str(make_event(message="hello"))
        assert "D1" in text
        assert "hello" in text


class TestDeviceEventBus:
    """Tests for subscription and delivery."""

    @pytest.fixture
    def bus(self) -> DeviceEventBus:
        return DeviceEventBus()

    def test_delivers_by_kind(self, bus: DeviceEventBus):
        events, commands = [], []
        bus.subscribe(MessageKind.EVENT, events.append)
        bus.subscribe(MessageKind.COMMAND, commands.append)

        bus.publish(make_event(MessageKind.COMMAND))

        assert events == []
        assert len(commands) == 1

    def test_wildcard_receives_everything(self, bus: DeviceEventBus):
        received = []
        bus.subscribe("*", received.append)

        bus.publish(make_event(MessageKind.EVENT))
        bus.publish(make_event(MessageKind.COMMAND))

        assert len(received) == 2

    def test_failing_handler_does_not_block_others(self, bus: DeviceEventBus):
        """Test that one handler raising does not stop delivery to the rest."""
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(MessageKind.EVENT, broken)
        bus.subscribe(MessageKind.EVENT, received.append)

        assert bus.publish(make_event()) == 2
        assert len(received) == 1

    def test_event_log(self, bus: DeviceEventBus):
        bus.publish(make_event())
        log = bus.get_event_log()
        log.clear()

        assert len(bus.get_event_log()) == 1
        bus.clear_event_log()
        assert bus.get_event_log() == []
