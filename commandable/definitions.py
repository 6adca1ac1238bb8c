"""
Definition Model
================

Plain data describing command and event declarations, and the two
table types that hold them.

    CommandDef     One command declaration (aliases + usage text)
    CommandGroup   Ordered members sharing one group name
    CommandTable   main name -> CommandDef | CommandGroup
    EventDef       One event declaration
    EventTable     primary event name -> [EventDef, ...]

A table exists at two scopes: one global instance used for
validation, and one instance per handler class used for binding.
Both hold the *same* definition objects, so resolving a handler on
one is visible through the other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Union


@dataclass
class CommandDef:
    """One command declaration.

    Attributes
    ----------
    aliases : list[str]
        Names that trigger the command, de-duplicated, in declared order.
    descriptions : list[str]
        Usage text, index-aligned with ``aliases``.
    handler_name : str
        Name of the method to invoke. Resolved at binding time.
    group : str or None
        Group this command belongs to, if any.
    handler : callable or None
        The bound method, set once when the owning class is bound.
    """
    aliases: list[str]
    descriptions: list[str]
    handler_name: str = ""
    group: Optional[str] = None
    handler: Optional[Callable] = field(default=None, repr=False, compare=False)

    @property
    def main_name(self) -> str:
        return self.group or self.aliases[0]

    def description_for(self, alias: str) -> str:
        """Usage text for the alias that was actually typed."""
        return self.descriptions[self.aliases.index(alias)]


class CommandGroup:
    """An ordered list of CommandDefs that share one group name.

    Represents a multi-subcommand command such as ``/admin kick``
    and ``/admin ban``.
    """

    def __init__(self, name: str, members: Optional[list[CommandDef]] = None):
        self.name = name
        self.members: list[CommandDef] = list(members or [])

    def append(self, command: CommandDef) -> None:
        self.members.append(command)

    def flat_aliases(self) -> list[str]:
        return [alias for member in self.members for alias in member.aliases]

    def flat_descriptions(self) -> list[str]:
        return [desc for member in self.members for desc in member.descriptions]

    def find(self, sub_name: str) -> Optional[CommandDef]:
        """First member, in declaration order, that owns ``sub_name``."""
        for member in self.members:
            if sub_name in member.aliases:
                return member
        return None

    def __iter__(self) -> Iterator[CommandDef]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def __repr__(self) -> str:
        return f"CommandGroup({self.name!r}, {self.members!r})"


CommandEntry = Union[CommandDef, CommandGroup]


class CommandTable:
    """Mapping from main name to a CommandDef or a CommandGroup.

    Iteration follows insertion order. ``insert`` applies the storage
    rules only; duplicate checking is the registry's job.
    """

    def __init__(self):
        self._entries: dict[str, CommandEntry] = {}

    def insert(self, command: CommandDef) -> None:
        if command.group:
            entry = self._entries.get(command.group)
            if not isinstance(entry, CommandGroup):
                entry = CommandGroup(command.group)
                self._entries[command.group] = entry
            entry.append(command)
        else:
            self._entries[command.aliases[0]] = command

    def get(self, main_name: str) -> Optional[CommandEntry]:
        return self._entries.get(main_name)

    def items(self):
        return self._entries.items()

    def standalone(self) -> Iterator[CommandDef]:
        for entry in self._entries.values():
            if isinstance(entry, CommandDef):
                yield entry

    def group_names(self) -> set[str]:
        return {name for name, entry in self._entries.items()
                if isinstance(entry, CommandGroup)}

    def __contains__(self, main_name: str) -> bool:
        return main_name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class EventDef:
    """One event declaration.

    ``resolved_function`` stays ``None`` until the owning class is bound.
    """
    names: list[str]
    handler_name: str = ""
    resolved_function: Optional[Callable] = field(default=None, repr=False, compare=False)

    @property
    def primary_name(self) -> str:
        return self.names[0]


class EventTable:
    """Append-only mapping from primary event name to EventDefs.

    Several declarations may share a primary name; all are kept, in
    the order they were appended.
    """

    def __init__(self):
        self._entries: dict[str, list[EventDef]] = {}
        self._order: list[EventDef] = []

    def append(self, event: EventDef) -> None:
        self._entries.setdefault(event.primary_name, []).append(event)
        self._order.append(event)

    def contains(self, event: EventDef) -> bool:
        return any(existing is event
                   for existing in self._entries.get(event.primary_name, []))

    def get(self, primary_name: str) -> list[EventDef]:
        return list(self._entries.get(primary_name, []))

    def items(self):
        return self._entries.items()

    def all(self) -> Iterator[EventDef]:
        """Every def, in the order it was appended."""
        return iter(list(self._order))

    def __contains__(self, primary_name: str) -> bool:
        return primary_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
