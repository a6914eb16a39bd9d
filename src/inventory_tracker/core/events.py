"""
Domain events passed between ledgers.

The unit ledger does not call the box-stock synchronizer directly. It
publishes UnitsAllocated after its own write has been persisted, and
whatever is subscribed reacts. Handlers run in subscription order; a
failing handler is logged and reported but does not stop the others, and
never undoes the write that produced the event.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Type

from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class UnitsAllocated:
    """
    Pairs of one SKU entered (or were corrected in) the unit ledger.

    quantity is always non-negative: corrections in either direction are
    published as their absolute size, and the box-stock handler deducts
    boxes for both.
    """
    sku: str
    quantity: int
    source: str = "add"
    occurred_at: datetime = field(default_factory=datetime.now)


@dataclass
class DispatchResult:
    event_type: str
    handlers_notified: int = 0
    handlers_failed: int = 0
    failures: List[Dict[str, Any]] = field(default_factory=list)


Handler = Callable[[Any], None]


class EventDispatcher:
    """Synchronous in-process event routing."""

    def __init__(self):
        self._handlers: Dict[Type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type.__name__}")

    def publish(self, event: Any) -> DispatchResult:
        """
        Deliver an event to every handler subscribed to its type.

        This method never raises; handler failures are collected in the result.
        """
        event_type = type(event).__name__
        result = DispatchResult(event_type=event_type)

        handlers = self._handlers.get(type(event), [])
        if not handlers:
            logger.debug(f"No handlers for {event_type}")
            return result

        for handler in handlers:
            handler_name = getattr(handler, "__qualname__", str(handler))
            try:
                handler(event)
                result.handlers_notified += 1
            except Exception as e:
                result.handlers_failed += 1
                result.failures.append({
                    "handler": handler_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                })
                logger.error(f"Handler {handler_name} failed for {event_type}: {e}", exc_info=True)

        return result
