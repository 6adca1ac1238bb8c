"""
Type Binder
===========

Collects the commands and events declared on a handler class, and
wires them to the host the first time the class is instantiated.

Declaring Handlers
------------------
    from commandable import command, event, commandable

    @commandable
    class Admin:
        @command(["kick", "k"], "admin")
        def kick(self, player, usage, target=None): ...

        @command("ban", {"group": "admin",
                         "desc": "Usage /{{groupName}} {{cmdName}} <id>"})
        def ban(self, player, usage, target=None): ...

        @event(["playerJoin", "playerReady"])
        def greet(self, player): ...

    Admin()     # binds kick/ban/greet to this instance

``@command`` and ``@event`` only record the declaration on the
function. ``@commandable`` walks the class body in definition order,
registers every recorded declaration (validation errors surface
here, at class-definition time) and wraps ``__init__`` so that
construction triggers binding.

The same can be done without decorators:

    binder.declare_command(Admin, "kick", "admin", "kick")
    binder.declare_event(Admin, "playerJoin", "greet")

Binding Lifecycle
-----------------
    class defined ──► declarations stored, BindingState(initialized=False)
    first instance ──► handlers resolved on *that* instance,
                       subscribed with the adapter,
                       initialized = True
    later instances ──► nothing happens

Only the first instance of a class is ever wired. Handler classes
are expected to be singletons; a second instance is a plain object
with no live routes. Subclasses that are not decorated themselves
share the binding state of the decorated base.

All handlers are resolved before the first subscription is made, so
a BindingError leaves the adapter untouched and the class unbound.
The check-and-set of the initialized flag runs under a lock; the
adapter is called after the lock is released, so an adapter may
construct further handlers while subscribing.
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from commandable.definitions import CommandGroup, CommandTable, EventTable
from commandable.dispatcher import CommandDispatcher
from commandable.errors import BindingError, ConfigError, RegistrationError
from commandable.events import EventFanout
from commandable.registry import CommandRegistry, EventRegistry

COMMANDS_ATTR = '__commandable_commands__'
EVENTS_ATTR = '__commandable_events__'

BINDING_MODES = ('command', 'line')
DEFAULT_LINE_EVENT = 'playerCommand'


def command(aliases: Union[str, Iterable[str]], options=None) -> Callable:
    """Declare a method as a command handler.

    Parameters
    ----------
    aliases : str or sequence of str
        Name(s) that trigger the command.
    options : str, mapping or CommandOptions, optional
        A bare string is the group name. A mapping may carry ``group``
        and ``desc``.

    The handler is called as ``handler(context, usage, *args)``.
    Stacked decorators on one method declare several commands; they
    are registered top to bottom.
    """
    def decorator(func):
        func.__dict__.setdefault(COMMANDS_ATTR, []).insert(0, (aliases, options))
        return func
    return decorator


def event(names: Union[str, Iterable[str]]) -> Callable:
    """Declare a method as a handler for one or more named events."""
    def decorator(func):
        func.__dict__.setdefault(EVENTS_ATTR, []).insert(0, names)
        return func
    return decorator


@dataclass
class BindingState:
    """Per-class flag. Set once, never reset."""
    initialized: bool = False


class TypeBinder:
    """Per-class declaration tables plus the one-time binding step.

    Parameters
    ----------
    commands : CommandRegistry, optional
        Global command registry shared by every handler class.
    events : EventRegistry, optional
        Global event registry.
    adapter : SubscriptionAdapter, optional
        May be attached later with ``attach``; must be set before the
        first handler instance is constructed.
    mode : str
        "command" subscribes each command name with the adapter.
        "line" subscribes one raw-line route per command under
        ``line_event`` instead.
    line_event : str
        Event name used by "line" mode.
    """

    def __init__(self, commands: Optional[CommandRegistry] = None,
                 events: Optional[EventRegistry] = None,
                 adapter=None, mode: str = 'command',
                 line_event: str = DEFAULT_LINE_EVENT):
        self.commands = commands if commands is not None else CommandRegistry()
        self.events = events if events is not None else EventRegistry()
        self.adapter = adapter
        self.mode = mode
        self.line_event = line_event
        self._command_tables: dict[type, CommandTable] = {}
        self._event_tables: dict[type, EventTable] = {}
        self._states: dict[type, BindingState] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

        if mode not in BINDING_MODES:
            raise ConfigError(f"Unknown binding mode '{mode}', expected one of {BINDING_MODES}")

    def attach(self, adapter) -> None:
        """Set the adapter used by subsequent bindings."""
        self.adapter = adapter

    def configure(self, binding_config) -> None:
        """Apply a BindingConfig section (mode and line event)."""
        if binding_config.mode not in BINDING_MODES:
            raise ConfigError(f"Unknown binding mode '{binding_config.mode}'")
        self.mode = binding_config.mode
        self.line_event = binding_config.line_event

    # ─── Per-class tables ───────────────────────────────────────────

    def _touch(self, cls: type) -> None:
        if cls not in self._states:
            self._states[cls] = BindingState()
            self._command_tables[cls] = CommandTable()
            self._event_tables[cls] = EventTable()

    def state(self, cls: type) -> BindingState:
        self._touch(cls)
        return self._states[cls]

    def command_table(self, cls: type) -> CommandTable:
        self._touch(cls)
        return self._command_tables[cls]

    def event_table(self, cls: type) -> EventTable:
        self._touch(cls)
        return self._event_tables[cls]

    # ─── Declaration ────────────────────────────────────────────────

    def declare_command(self, cls: type, aliases, options=None,
                        handler: Union[str, Callable] = ""):
        """Register a command for ``cls`` globally and in its own table."""
        handler_name = handler if isinstance(handler, str) else getattr(handler, '__name__', '')
        if not callable(getattr(cls, handler_name, None)):
            message = f"Command {aliases!r} on {cls.__name__} should be callable"
            self.logger.error(message)
            raise RegistrationError(message)
        return self.commands.register(aliases, options, handler_name,
                                      local_table=self.command_table(cls))

    def declare_event(self, cls: type, names, handler: Union[str, Callable]):
        """Register an event handler for ``cls``."""
        if isinstance(handler, str):
            handler_name = handler
            handler = getattr(cls, handler, None)
        else:
            handler_name = getattr(handler, '__name__', '')
        return self.events.register(names, handler, handler_name,
                                    local_table=self.event_table(cls))

    def commandable(self, cls: Optional[type] = None):
        """Class decorator: register recorded declarations, hook ``__init__``.

        Usable bare (``@binder.commandable``) or called
        (``@binder.commandable()``).
        """
        def decorate(target: type) -> type:
            self._touch(target)
            for name, attr in list(vars(target).items()):
                func = getattr(attr, '__func__', attr)
                for aliases, options in getattr(func, COMMANDS_ATTR, ()):
                    self.declare_command(target, aliases, options, name)
                for names in getattr(func, EVENTS_ATTR, ()):
                    self.declare_event(target, names, name)
            self._wrap_init(target)
            return target

        return decorate(cls) if cls is not None else decorate

    def _wrap_init(self, cls: type) -> None:
        original_init = cls.__init__
        binder = self

        @functools.wraps(original_init)
        def __init__(instance, *args, **kwargs):
            original_init(instance, *args, **kwargs)
            binder.bind(instance, cls)

        cls.__init__ = __init__

    # ─── Binding ────────────────────────────────────────────────────

    def bind(self, instance, cls: Optional[type] = None) -> bool:
        """Wire ``cls``'s declarations to ``instance`` if not done yet.

        Returns True if this call performed the binding, False if the
        class was already bound.

        Raises
        ------
        BindingError
            If no adapter is attached or a declared handler is missing
            or not callable on ``instance``.
        """
        cls = cls or type(instance)
        with self._lock:
            state = self.state(cls)
            if state.initialized:
                self.logger.debug(f"{cls.__name__} already bound, skipping")
                return False

            if self.adapter is None:
                self._fail(f"Cannot bind {cls.__name__}: no subscription adapter attached")

            command_table = self.command_table(cls)
            event_table = self.event_table(cls)

            resolved_commands = [
                (member, self._resolve(instance, member.handler_name, main_name))
                for main_name, entry in command_table.items()
                for member in (entry if isinstance(entry, CommandGroup) else [entry])
            ]
            resolved_events = [
                (event_def, self._resolve(instance, event_def.handler_name,
                                          f"Event[{event_def.primary_name}]"))
                for event_def in event_table.all()
            ]

            for member, func in resolved_commands:
                member.handler = func
            for event_def, func in resolved_events:
                event_def.resolved_function = func

            state.initialized = True
            adapter = self.adapter

        # Adapter calls happen outside the lock.
        self._subscribe_commands(adapter, command_table)

        fanout = EventFanout(adapter, self.events.table)
        for event_def, _ in resolved_events:
            fanout.forward(event_def)

        self.logger.info(
            f"Bound {cls.__name__}: {len(command_table)} command(s), "
            f"{len(resolved_events)} event handler(s)"
        )
        return True

    def _resolve(self, instance, handler_name: str, label: str) -> Callable:
        func = getattr(instance, handler_name, None) if handler_name else None
        if not callable(func):
            self._fail(f"{label} in {type(instance).__name__} is not callable!")
        return func

    def _subscribe_commands(self, adapter, command_table: CommandTable) -> None:
        dispatcher = CommandDispatcher(adapter)
        for main_name, entry in command_table.items():
            if self.mode == 'line':
                adapter.subscribe_event(self.line_event, dispatcher.line(entry, main_name))
            elif isinstance(entry, CommandGroup):
                adapter.subscribe_command(main_name, dispatcher.group(entry))
            else:
                for alias in entry.aliases:
                    adapter.subscribe_command(alias, dispatcher.standalone(entry, alias))

    def _fail(self, message: str) -> None:
        self.logger.error(message)
        raise BindingError(message)
