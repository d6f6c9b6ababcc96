"""In-process domain events.

Handlers run synchronously inside the publisher's session, so whatever they
write is committed or rolled back together with the publishing aggregate.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Callable, Dict, List, Type
from uuid import UUID

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceCreatedForProject:
    """A payable invoice was raised against a project."""
    invoice_id: UUID
    invoice_number: str
    project_id: UUID
    total_amount: Decimal


Handler = Callable[[Session, object], None]


class EventBus:
    """Maps event types to handlers."""

    def __init__(self):
        self._handlers: Dict[Type, List[Handler]] = {}

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def publish(self, db: Session, event: object) -> None:
        """Dispatch ``event`` to every handler registered for its type."""
        handlers = self._handlers.get(type(event), [])
        for handler in handlers:
            logger.debug(f"Dispatching {type(event).__name__} to {handler.__name__}")
            handler(db, event)


@lru_cache
def get_event_bus() -> EventBus:
    """Application event bus with the standard handlers wired in."""
    from app.domain.projects.budget_service import apply_invoice_to_project_spend

    bus = EventBus()
    bus.subscribe(InvoiceCreatedForProject, apply_invoice_to_project_spend)
    return bus
