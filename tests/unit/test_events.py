"""
Unit tests for EventDispatcher
"""
from unittest.mock import MagicMock

from inventory_tracker.core.events import EventDispatcher, UnitsAllocated


class TestEventDispatcher:
    """Test synchronous event delivery"""

    def test_handlers_run_in_subscription_order(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe(UnitsAllocated, lambda event: calls.append(("first", event.sku)))
        dispatcher.subscribe(UnitsAllocated, lambda event: calls.append(("second", event.sku)))

        result = dispatcher.publish(UnitsAllocated(sku="A-1-B", quantity=3))

        assert calls == [("first", "A-1-B"), ("second", "A-1-B")]
        assert result.handlers_notified == 2
        assert result.handlers_failed == 0

    def test_failing_handler_does_not_stop_others(self):
        dispatcher = EventDispatcher()
        failing = MagicMock(side_effect=ValueError("boom"))
        healthy = MagicMock()
        dispatcher.subscribe(UnitsAllocated, failing)
        dispatcher.subscribe(UnitsAllocated, healthy)

        result = dispatcher.publish(UnitsAllocated(sku="A-1-B", quantity=3))

        healthy.assert_called_once()
        assert result.handlers_failed == 1
        assert result.failures[0]["error"] == "boom"
        assert result.failures[0]["error_type"] == "ValueError"

    def test_publish_without_handlers(self):
        result = EventDispatcher().publish(UnitsAllocated(sku="A-1-B", quantity=1))

        assert result.event_type == "UnitsAllocated"
        assert result.handlers_notified == 0
