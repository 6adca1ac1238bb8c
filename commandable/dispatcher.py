"""
Command Dispatcher
==================

Turns bound command definitions into the route callables that a
SubscriptionAdapter invokes for each incoming line.

    Host receives: "admin ban 5"
                  ↓
    Adapter splits off "admin" → calls route(context, ["ban", "5"])
                  ↓
    Group route looks up "ban" among the group's subcommands → found!
                  ↓
    Calls handler(context, "Usage /admin ban", "5")

    Host receives: "admin nope"
                  ↓
    Group route finds no "nope" → sends every usage line back
    to the sender, in declaration order. No handler runs.

Routing Rules
-------------
- Plain command: the handler receives the usage text of the alias
  that was actually typed. For aliases ["foo", "f"], typing "f"
  gives "Usage /f", not "Usage /foo".
- Group command: the first token after the group name selects the
  subcommand. The first member (declaration order) that owns the
  token wins; only that member runs.
- Matching is exact and case-sensitive. Arguments stay strings.
- Whatever the handler returns is passed back to the adapter.
  Handler exceptions are not caught here.

Line Mode
---------
Some hosts deliver every typed line through one event instead of
per-command subscriptions. ``CommandDispatcher.line`` builds a route
for that case: it parses the whole line itself and ignores lines
whose command name belongs to someone else.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, Union

from commandable.definitions import CommandDef, CommandGroup

logger = logging.getLogger(__name__)


def parse_line(line: str) -> tuple[str, list[str]]:
    """Split a raw line into (command name, args).

    Runs of whitespace separate tokens. A blank line gives ("", []).
    """
    tokens = line.split()
    if not tokens:
        return "", []
    return tokens[0], tokens[1:]


class CommandDispatcher:
    """Builds routes for bound commands.

    Parameters
    ----------
    adapter : SubscriptionAdapter
        Used for ``send_text`` when a group prints its help lines.
    """

    def __init__(self, adapter):
        self.adapter = adapter

    def standalone(self, command: CommandDef, alias: str) -> Callable:
        """Route for one alias of a plain command."""
        description = command.description_for(alias)

        def route(context: Any, args: Sequence[str] = ()):
            logger.debug(f"Dispatching '{alias}' to {command.handler_name} with {list(args)}")
            return command.handler(context, description, *args)

        return route

    def group(self, group: CommandGroup) -> Callable:
        """Route for a whole group, subscribed under the group name."""

        def route(context: Any, args: Sequence[str] = ()):
            return self.dispatch_group(group, context, list(args))

        return route

    def dispatch_group(self, group: CommandGroup, context: Any, args: list[str]):
        sub_name = args[0] if args else None
        rest = args[1:]

        flat_aliases = group.flat_aliases()
        flat_descriptions = group.flat_descriptions()

        if sub_name is None or sub_name not in flat_aliases:
            logger.debug(f"Group '{group.name}': no subcommand {sub_name!r}, sending help")
            for text in flat_descriptions:
                self.adapter.send_text(context, text)
            return None

        member = group.find(sub_name)
        description = flat_descriptions[flat_aliases.index(sub_name)]
        logger.debug(f"Dispatching '{group.name} {sub_name}' to {member.handler_name} with {rest}")
        return member.handler(context, description, *rest)

    def line(self, entry: Union[CommandDef, CommandGroup], main_name: str) -> Callable:
        """Route that receives whole lines instead of pre-split args.

        The returned callable is ``route(line, context=None)`` and
        returns True when the line belonged to ``entry``.
        """

        def route(line: str, context: Any = None) -> bool:
            name, args = parse_line(line)
            if not name:
                return False

            if isinstance(entry, CommandGroup):
                if name != main_name:
                    return False
                self.dispatch_group(entry, context, args)
                return True

            if name not in entry.aliases:
                return False
            entry.handler(context, entry.description_for(name), *args)
            return True

        return route
