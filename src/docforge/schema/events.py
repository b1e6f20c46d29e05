"""Lifecycle event object passed to event handlers."""

from dataclasses import dataclass, field
from typing import Any, Callable

# Events triggered by docforge itself. Classes may declare and trigger others.
LIFECYCLE_EVENTS = (
    "afterInit",
    "beforeSave",
    "afterSave",
    "beforeInsert",
    "afterInsert",
    "beforeUpdate",
    "afterUpdate",
    "beforeRemove",
    "afterRemove",
)


@dataclass
class Event:
    """Runtime state of one triggered event.

    Attributes:
        type: Event name (e.g., "beforeSave")
        doc: Document the event was triggered for
        data: Extra keyword data passed to trigger_event
        default_prevented: Set by prevent_default(); callers skip the default action
        propagation_stopped: Set by stop_propagation(); no further handlers run
    """

    type: str
    doc: Any
    data: dict[str, Any] = field(default_factory=dict)
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


EventHandler = Callable[[Event], Any]
