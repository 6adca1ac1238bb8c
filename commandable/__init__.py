"""
Commandable
===========

A declarative command and event registration engine. Handler
classes declare up front which text commands and which named events
they answer; the engine validates those declarations, wires them to
the host the first time a handler is constructed, and routes each
incoming line or event to the right method.

Architecture Overview
---------------------
    ┌──────────────────┐  declare   ┌──────────────────┐
    │  @command/@event │──────────►│  Command/Event    │  global tables,
    │  on methods      │            │  Registry         │  validation
    └────────┬─────────┘            └──────────────────┘
             │ @commandable
    ┌────────▼─────────┐  first instance  ┌──────────────────┐
    │  TypeBinder      │────────────────►│  Subscription    │◄── host lines
    │  per-class tables│  subscribe       │  Adapter         │◄── host events
    └──────────────────┘                  └────────┬─────────┘
                                                   │
                                 ┌─────────────────▼──────────┐
                                 │ CommandDispatcher routes /  │
                                 │ EventFanout handlers        │
                                 └────────────────────────────┘

Quick Start
-----------
    from commandable import LocalAdapter, binder, command, commandable

    binder.attach(LocalAdapter())

    @commandable
    class Chat:
        @command(["foo", "f"])
        def foo(self, player, usage, *args):
            ...

        @command("kick", "admin")
        def kick(self, player, usage, target=None):
            ...

    Chat()                                  # binds, once per class
    binder.adapter.run_command("f bar baz", player)
        # → Chat.foo(player, "Usage /f", "bar", "baz")

Handlers receive ``(context, usage, *args)``: the context the host
passed along (usually the sender), the usage line of the alias that
was typed, and the remaining whitespace-split tokens as strings.

Module Structure
----------------
    commandable/
    ├── __init__.py      ← This file. Builds the default engine.
    ├── definitions.py   ← CommandDef, CommandGroup, EventDef and tables.
    ├── registry.py      ← CommandRegistry, EventRegistry (validation).
    ├── binder.py        ← TypeBinder, @command, @event, @commandable.
    ├── dispatcher.py    ← CommandDispatcher: plain and group routing.
    ├── events.py        ← EventFanout.
    ├── adapters.py      ← SubscriptionAdapter ABC, LocalAdapter.
    ├── config.py        ← YAML configuration and logging setup.
    ├── errors.py        ← RegistrationError, BindingError, ConfigError.
    └── demo.py          ← Interactive console demo.

The module-level ``binder`` is the process-wide default. Tests and
embedders that need isolation build their own TypeBinder, which owns
its own registries.

Dependencies
------------
PyYAML for configuration files. Everything else is standard library.

License
-------
GPL 3.0
"""

from commandable.adapters import LocalAdapter, SubscriptionAdapter
from commandable.binder import BindingState, TypeBinder, command, event
from commandable.definitions import (
    CommandDef,
    CommandGroup,
    CommandTable,
    EventDef,
    EventTable,
)
from commandable.dispatcher import CommandDispatcher, parse_line
from commandable.errors import (
    BindingError,
    CommandableError,
    ConfigError,
    RegistrationError,
)
from commandable.events import EventFanout
from commandable.registry import CommandOptions, CommandRegistry, EventRegistry

# ─── Build the default engine ──────────────────────────────────────

command_registry = CommandRegistry()
event_registry = EventRegistry()
binder = TypeBinder(command_registry, event_registry)
commandable = binder.commandable

__all__ = [
    'binder', 'command_registry', 'event_registry', 'command', 'event', 'commandable',
    'TypeBinder', 'BindingState',
    'CommandRegistry', 'EventRegistry', 'CommandOptions',
    'CommandDef', 'CommandGroup', 'CommandTable', 'EventDef', 'EventTable',
    'CommandDispatcher', 'EventFanout', 'parse_line',
    'SubscriptionAdapter', 'LocalAdapter',
    'CommandableError', 'RegistrationError', 'BindingError', 'ConfigError',
]
