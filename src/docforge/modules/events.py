"""Events module: lifecycle and custom event handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docforge.modules.base import BaseModule, MergedFragment
from docforge.schema.events import LIFECYCLE_EVENTS, EventHandler

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema

logger = logging.getLogger(__name__)


class EventsModule(BaseModule):
    """Event handlers accumulate down the chain: parent handlers run first."""

    name = "events"

    def parse_definition(
        self, definition: dict[str, Any], seed: Any
    ) -> dict[str, list[EventHandler]]:
        section = definition.get("events") or {}
        if not isinstance(section, dict):
            raise ValueError("'events' must be a mapping of event name to handlers")

        events: dict[str, list[EventHandler]] = {}
        for event_name, handlers in section.items():
            if not isinstance(handlers, (list, tuple)):
                handlers = [handlers]
            for handler in handlers:
                if not callable(handler):
                    raise ValueError(f"Handler for event '{event_name}' is not callable")
            if event_name not in LIFECYCLE_EVENTS:
                logger.debug("Custom event '%s' declared", event_name)
            events[event_name] = list(handlers)
        return events

    def merge_definitions(
        self, parent: MergedFragment | None, parsed: dict[str, list[EventHandler]]
    ) -> MergedFragment:
        effective: dict[str, list[EventHandler]] = {}
        if parent is not None:
            effective = {name: list(handlers) for name, handlers in parent.effective.items()}
        for name, handlers in parsed.items():
            effective.setdefault(name, []).extend(handlers)
        return MergedFragment(own=parsed, effective=effective)

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        schema.events = merged.effective
