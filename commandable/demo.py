#!/usr/bin/env python3
"""
Commandable: Interactive Demo

Simulates a host's chat input loop. Lines are routed through a
LocalAdapter to a sample handler class. Try:

    roll d20
    r 3d6
    admin
    admin ban 42
    admin b 42
    join Alice
    /quit

"""

import argparse
import random
import re

from commandable.adapters import LocalAdapter
from commandable.binder import TypeBinder, command, event
from commandable.config import ConfigurationManager, setup_logging

_DICE_PATTERN = re.compile(r'^(\d*)d(\d+)$', re.IGNORECASE)


def build_demo(config=None, output=print):
    """Build a bound engine with the sample handler.

    Returns (binder, adapter, handler instance).
    """
    adapter = LocalAdapter(output=lambda player, text: output(f"  [{player}] {text}"))
    binder = TypeBinder(adapter=adapter)
    if config is not None:
        binder.configure(config.binding)

    @binder.commandable
    class TableTop:
        @command(["roll", "r"], {"desc": "Usage: /{{cmdName}} [N]d<S>"})
        def roll(self, player, usage, notation=None, *_):
            match = _DICE_PATTERN.match(notation or "")
            if match is None:
                return adapter.send_text(player, usage)
            count = int(match.group(1) or 1)
            sides = int(match.group(2))
            rolls = [random.randint(1, sides) for _ in range(count)]
            adapter.send_text(player, f"{notation} -> {rolls} = {sum(rolls)}")

        @command("kick", "admin")
        def kick(self, player, usage, target=None, *_):
            if target is None:
                return adapter.send_text(player, usage)
            adapter.send_text(player, f"kicked {target}")

        @command(["ban", "b"], {"group": "admin",
                                "desc": "Usage: /{{groupName}} {{cmdName}} <id>"})
        def ban(self, player, usage, target=None, *_):
            if target is None:
                return adapter.send_text(player, usage)
            adapter.send_text(player, f"banned {target}")

        @event(["playerJoin", "join"])
        def greet(self, name):
            adapter.send_text(name, f"welcome, {name}")

    return binder, adapter, TableTop()


def main():
    parser = argparse.ArgumentParser(description="Commandable interactive demo")
    parser.add_argument('--config', help="YAML configuration file")
    parser.add_argument('--verbose', '-v', action='store_true', help="debug logging")
    parser.add_argument('--quiet', '-q', action='store_true', help="warnings only")
    parser.add_argument('--line-mode', action='store_true',
                        help="route whole lines through one event")
    args = parser.parse_args()

    manager = ConfigurationManager()
    manager.load_config(args.config)
    config = manager.merge_cli_args(args)
    setup_logging(config)

    binder, adapter, _ = build_demo(config)

    print("=" * 60)
    print("  Commandable Demo")
    print("  Commands: roll/r, admin kick|ban|b, join <name>; /quit to exit")
    print("=" * 60)
    print()

    while True:
        try:
            line = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nbye!")
            break

        if not line:
            continue
        if line.lower() == "/quit":
            print("bye!")
            break

        words = line.split()
        if words[0] == "join" and len(words) > 1:
            adapter.emit("join", words[1])
            continue

        if binder.mode == 'line':
            adapter.emit(binder.line_event, line, "you")
        elif not adapter.run_command(line, "you"):
            print(f"  [chat] {line}")


if __name__ == "__main__":
    main()
