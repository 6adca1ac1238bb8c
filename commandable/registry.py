"""
Command and Event Registries
============================

The process-wide tables that every handler class registers into.

CommandRegistry
    Enforces alias uniqueness and group consistency across *all*
    handler classes. A declaration that would make two commands
    answer to the same top-level name is rejected with
    RegistrationError before anything is stored.

    Rules, in the order they are checked:

        plain command "foo"           main name "foo" must be free
        plain command ["foo", "f"]    no alias may belong to another
                                      plain command or be a group name
        grouped "kick" in "admin"     "kick" must be new inside "admin"
                                      and "admin" must not be a plain
                                      command alias

    Subcommand aliases are only unique within their own group:
    "/admin kick" and "/mod kick" can coexist.

EventRegistry
    Append-only. Any number of handlers may listen for the same
    event name. Declarations are kept in ``declared``; a handler
    joins ``table`` when its class is bound, so ``table`` lists
    handlers in the order they fire.

Description Templates
---------------------
A command may carry a usage template instead of the default
"Usage /<alias>" text. Two placeholders are understood:

    {{cmdName}}     the alias the line was typed with
    {{groupName}}   the group name (grouped commands only)

    "Usage: /{{groupName}} {{cmdName}} id"  under group "g", alias "x"
        -> "Usage: /g x id"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Union

from commandable.definitions import (
    CommandDef,
    CommandGroup,
    CommandTable,
    EventDef,
    EventTable,
)
from commandable.errors import RegistrationError

logger = logging.getLogger(__name__)

CMD_NAME_PLACEHOLDER = "{{cmdName}}"
GROUP_NAME_PLACEHOLDER = "{{groupName}}"


@dataclass
class CommandOptions:
    """Optional settings for a command declaration."""
    group: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def coerce(cls, options) -> 'CommandOptions':
        """Accept None, a bare group name, a mapping, or an instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, str):
            return cls(group=options or None)
        if isinstance(options, Mapping):
            return cls(
                group=options.get('group') or None,
                description=options.get('description', options.get('desc')) or None,
            )
        raise RegistrationError(f"Unsupported command options: {options!r}")


def normalize_names(names: Union[str, Iterable[str]]) -> list[str]:
    """Turn one name or a sequence of names into a de-duplicated list.

    First occurrence wins. Empty strings are dropped.
    """
    if isinstance(names, str):
        names = [names]
    result: list[str] = []
    for name in names:
        if name and name not in result:
            result.append(name)
    return result


def build_descriptions(aliases: list[str], group: Optional[str] = None,
                       template: Optional[str] = None) -> list[str]:
    """Render one usage line per alias."""
    if template:
        descriptions = []
        for alias in aliases:
            text = template.replace(CMD_NAME_PLACEHOLDER, alias, 1)
            if group:
                text = text.replace(GROUP_NAME_PLACEHOLDER, group, 1)
            descriptions.append(text)
        return descriptions
    if group:
        return [f"Usage /{group} {alias}" for alias in aliases]
    return [f"Usage /{alias}" for alias in aliases]


class CommandRegistry:
    """Global command table with cross-class validation.

    Usage
    -----
        commands = CommandRegistry()
        commands.register(["foo", "f"])
        commands.register("kick", "admin")
        commands.register("ban", {"group": "admin",
                                  "desc": "Usage /{{groupName}} {{cmdName}} <id>"})
    """

    def __init__(self):
        self.table = CommandTable()
        self.logger = logging.getLogger(__name__)

    def register(self, aliases: Union[str, Iterable[str]], options=None,
                 handler_name: str = "",
                 local_table: Optional[CommandTable] = None) -> CommandDef:
        """Validate and store one command declaration.

        Parameters
        ----------
        aliases : str or sequence of str
            Name(s) that trigger the command.
        options : None, str, mapping or CommandOptions
            A bare string is the group name. A mapping may carry
            ``group`` and ``desc`` (or ``description``).
        handler_name : str
            Method name to resolve when the owning class is bound.
        local_table : CommandTable, optional
            The owning class's table. Receives the same definition.

        Raises
        ------
        RegistrationError
            If the declaration conflicts with anything already stored.
            Neither table is modified in that case.
        """
        opts = CommandOptions.coerce(options)
        names = normalize_names(aliases)
        group = opts.group
        main_name = group or (names[0] if names else "")

        if not main_name:
            self._fail("Wrong command registration: no aliases and no group given")
        if not names:
            self._fail(f"Group \"{group}\" needs at least one subcommand alias")

        if group:
            self._check_group(group, names)
        else:
            self._check_standalone(main_name, names)

        command = CommandDef(
            aliases=names,
            descriptions=build_descriptions(names, group, opts.description),
            handler_name=handler_name,
            group=group,
        )

        self.table.insert(command)
        if local_table is not None:
            local_table.insert(command)

        if group:
            self.logger.info(f"Registered subcommand {names} in group '{group}'")
        else:
            self.logger.info(f"Registered command {names}")
        return command

    def _check_standalone(self, main_name: str, names: list[str]) -> None:
        if main_name in self.table:
            self._fail(f"duplicate command \"{main_name}\"")

        for existing in self.table.standalone():
            intersect = [name for name in names if name in existing.aliases]
            if intersect:
                self._fail(f"duplicate command \"{','.join(intersect)}\"")

        clashes = [name for name in names if name in self.table.group_names()]
        if clashes:
            self._fail(
                f"group/command collision: \"{','.join(clashes)}\" "
                f"is already a command group"
            )

    def _check_group(self, group: str, names: list[str]) -> None:
        entry = self.table.get(group)
        if isinstance(entry, CommandGroup):
            flat = entry.flat_aliases()
            intersect = [name for name in names if name in flat]
            if intersect:
                self._fail(
                    f"duplicate in group \"{group}\": \"{','.join(intersect)}\""
                )
            return

        if any(group in existing.aliases for existing in self.table.standalone()):
            self._fail(
                f"group/command collision: cannot make group \"{group}\", "
                f"a command with that name already exists"
            )

    def _fail(self, message: str) -> None:
        self.logger.error(message)
        raise RegistrationError(message)

    def lookup(self, main_name: str):
        """Return the CommandDef or CommandGroup stored under ``main_name``."""
        return self.table.get(main_name)

    def list_commands(self) -> list[tuple[str, str]]:
        """Return (trigger, usage) pairs for every registered alias.

        Grouped aliases are listed as "<group> <alias>". Order follows
        registration order.
        """
        result = []
        for main_name, entry in self.table.items():
            if isinstance(entry, CommandGroup):
                for alias, desc in zip(entry.flat_aliases(), entry.flat_descriptions()):
                    result.append((f"{main_name} {alias}", desc))
            else:
                result.extend(zip(entry.aliases, entry.descriptions))
        return result


class EventRegistry:
    """Global, append-only tables of event declarations.

    Attributes
    ----------
    declared : EventTable
        Every declaration, in declaration order.
    table : EventTable
        Bound declarations only, in the order their classes were
        bound. This is the order the adapter fires them in.
    """

    def __init__(self):
        self.declared = EventTable()
        self.table = EventTable()
        self.logger = logging.getLogger(__name__)

    def register(self, names: Union[str, Iterable[str]], handler: Callable,
                 handler_name: Optional[str] = None,
                 local_table: Optional[EventTable] = None) -> EventDef:
        """Store one event declaration.

        Parameters
        ----------
        names : str or sequence of str
            Event name(s). The first is the primary name.
        handler : callable
            The function declared as the handler. Only checked for
            callability here; the bound method is resolved later.
        handler_name : str, optional
            Attribute name to resolve at binding time. Defaults to
            ``handler.__name__``.
        local_table : EventTable, optional
            The owning class's table.

        Raises
        ------
        RegistrationError
            If no name is given or the handler is not callable.
        """
        events = normalize_names(names)
        if not events:
            self._fail("Event declaration needs at least one event name")
        if not callable(handler):
            self._fail(f"Event[{events[0]}] must be callable")

        event = EventDef(
            names=events,
            handler_name=handler_name or getattr(handler, '__name__', ''),
        )

        if local_table is not None:
            local_table.append(event)
        self.declared.append(event)

        self.logger.info(f"Registered event handler '{event.handler_name}' for {events}")
        return event

    def _fail(self, message: str) -> None:
        self.logger.error(message)
        raise RegistrationError(message)

    def handlers_for(self, name: str) -> list[Callable]:
        """Resolved handlers listening for ``name``, in binding order."""
        return [
            event.resolved_function
            for event in self.table.all()
            if name in event.names and event.resolved_function is not None
        ]
