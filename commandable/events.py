"""
Event Fan-out.

Forwards bound event handlers to the adapter. Each declared name gets
its own subscription, and the adapter passes its payload straight
through. Handlers listening for the same name run in the order they
were bound. There is no filtering, priority or cancellation.
"""

from __future__ import annotations

import logging

from commandable.definitions import EventDef, EventTable

logger = logging.getLogger(__name__)


class EventFanout:
    """Subscribes resolved event handlers and records them as bound.

    Parameters
    ----------
    adapter : SubscriptionAdapter
        Receives one ``subscribe_event`` call per declared name.
    global_table : EventTable
        The registry's bound-handler table. Each forwarded EventDef
        is appended once, so its order matches subscription order.
    """

    def __init__(self, adapter, global_table: EventTable):
        self.adapter = adapter
        self.global_table = global_table

    def forward(self, event: EventDef) -> None:
        """Publish one resolved EventDef under every name it declares."""
        if not self.global_table.contains(event):
            self.global_table.append(event)
        for name in event.names:
            self.adapter.subscribe_event(name, event.resolved_function)
        logger.debug(f"Forwarded '{event.handler_name}' for {event.names}")
