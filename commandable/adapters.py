"""
Subscription Adapters
=====================

The engine never receives text or events on its own. A host runtime
does that and hands them over through a SubscriptionAdapter:

    subscribe_command(name, route)   route(context, args) on each line
                                     whose first token is ``name``
    subscribe_event(name, handler)   handler(*payload) on each event
    send_text(context, text)         show text to whoever typed the line

LocalAdapter is a complete in-memory host. It is used by the tests
and by the interactive demo, and is a template for wiring the engine
into a real chat server or game runtime.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from commandable.dispatcher import parse_line

logger = logging.getLogger(__name__)


class SubscriptionAdapter(ABC):
    """Bridge between the engine and the host's transport."""

    @abstractmethod
    def subscribe_command(self, name: str, route: Callable) -> None:
        """Call ``route(context, args)`` for every line starting with ``name``."""
        ...

    @abstractmethod
    def subscribe_event(self, name: str, handler: Callable) -> None:
        """Call ``handler(*payload)`` whenever event ``name`` fires."""
        ...

    @abstractmethod
    def send_text(self, context: Any, text: str) -> None:
        """Deliver one line of text to the sender identified by ``context``."""
        ...


class LocalAdapter(SubscriptionAdapter):
    """In-process host: routes lines and events to subscribed callables.

    Attributes
    ----------
    commands : dict[str, Callable]
        One route per command name. A later subscription for the same
        name replaces the earlier one, as most hosts do.
    events : dict[str, list[Callable]]
        Every handler subscribed per event name, in subscription order.
    sent : list[tuple]
        Every ``(context, text)`` passed to send_text.
    """

    def __init__(self, output: Optional[Callable[[Any, str], None]] = None):
        self.commands: dict[str, Callable] = {}
        self.events: dict[str, list[Callable]] = {}
        self.sent: list[tuple[Any, str]] = []
        self.output = output

    def subscribe_command(self, name: str, route: Callable) -> None:
        if name in self.commands:
            logger.warning(f"Command '{name}' re-subscribed, replacing previous route")
        self.commands[name] = route
        logger.debug(f"Subscribed command '{name}'")

    def subscribe_event(self, name: str, handler: Callable) -> None:
        self.events.setdefault(name, []).append(handler)
        logger.debug(f"Subscribed event '{name}'")

    def send_text(self, context: Any, text: str) -> None:
        self.sent.append((context, text))
        if self.output is not None:
            self.output(context, text)

    def run_command(self, line: str, context: Any = None) -> bool:
        """Route one typed line, without its leading slash.

        Returns True if a route was subscribed for the command name.
        """
        name, args = parse_line(line)
        route = self.commands.get(name)
        if route is None:
            return False
        route(context, args)
        return True

    def emit(self, name: str, *payload) -> int:
        """Fire event ``name``. Returns how many handlers ran."""
        handlers = list(self.events.get(name, []))
        for handler in handlers:
            handler(*payload)
        return len(handlers)
