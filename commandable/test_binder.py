"""
Tests for per-class declaration and one-time binding.
"""

import threading
from unittest.mock import Mock

import pytest

from commandable.adapters import LocalAdapter
from commandable.binder import TypeBinder, command, event
from commandable.config import BindingConfig
from commandable.errors import BindingError, ConfigError, RegistrationError


def subscribed_commands(adapter):
    return [c.args[0] for c in adapter.subscribe_command.call_args_list]


def subscribed_events(adapter):
    return [c.args[0] for c in adapter.subscribe_event.call_args_list]


# ============================================================
# Declaration
# ============================================================

class TestDeclaration:

    def test_decorators_register_in_definition_order(self):
        binder = TypeBinder(adapter=Mock())

        @binder.commandable
        class Handler:
            @command(["foo", "f"])
            def foo(self, ctx, usage, *args):
                pass

            @command("kick", "admin")
            def kick(self, ctx, usage, *args):
                pass

        assert list(binder.command_table(Handler)) == ["foo", "admin"]
        assert list(binder.commands.table) == ["foo", "admin"]
        assert binder.state(Handler).initialized is False

    def test_stacked_decorators_register_top_to_bottom(self):
        binder = TypeBinder(adapter=Mock())

        @binder.commandable()
        class Handler:
            @command("a")
            @command("b")
            def both(self, ctx, usage, *args):
                pass

        assert list(binder.command_table(Handler)) == ["a", "b"]

    def test_conflict_raises_at_class_definition(self):
        binder = TypeBinder(adapter=Mock())

        @binder.commandable
        class First:
            @command(["foo", "f"])
            def foo(self, ctx, usage):
                pass

        with pytest.raises(RegistrationError, match="duplicate command"):
            @binder.commandable
            class Second:
                @command("f")
                def f(self, ctx, usage):
                    pass

    def test_explicit_non_callable_command_rejected(self):
        binder = TypeBinder()

        class Handler:
            value = 3

        with pytest.raises(RegistrationError, match="callable"):
            binder.declare_command(Handler, "x", None, "value")
        assert "x" not in binder.commands.table

    def test_explicit_non_callable_event_rejected(self):
        binder = TypeBinder()

        class Handler:
            value = 3

        with pytest.raises(RegistrationError, match="callable"):
            binder.declare_event(Handler, "tick", "value")

    def test_explicit_builder_api(self):
        adapter = LocalAdapter()
        binder = TypeBinder(adapter=adapter)
        seen = []

        class Handler:
            def foo(self, ctx, usage, *args):
                seen.append((ctx, usage, args))

        binder.declare_command(Handler, ["foo"], None, Handler.foo)
        instance = Handler()
        assert binder.bind(instance) is True
        assert binder.bind(instance) is False
        adapter.run_command("foo 1", "ctx")
        assert seen == [("ctx", "Usage /foo", ("1",))]

    def test_unknown_mode_rejected(self):
        with pytest.raises(ConfigError):
            TypeBinder(mode="telepathy")

    def test_configure_applies_binding_section(self):
        binder = TypeBinder()
        binder.configure(BindingConfig(mode="line", line_event="chat"))
        assert binder.mode == "line"
        assert binder.line_event == "chat"


# ============================================================
# Binding
# ============================================================

class TestBinding:

    def test_two_instances_subscribe_once(self):
        adapter = Mock()
        binder = TypeBinder(adapter=adapter)

        @binder.commandable
        class Handler:
            @command(["foo", "f"])
            def foo(self, ctx, usage, *args):
                pass

            @command("kick", "admin")
            def kick(self, ctx, usage, *args):
                pass

            @command(["ban", "b"], "admin")
            def ban(self, ctx, usage, *args):
                pass

            @event(["join", "ready"])
            def greet(self, *payload):
                pass

        Handler()
        Handler()

        assert subscribed_commands(adapter) == ["foo", "f", "admin"]
        assert subscribed_events(adapter) == ["join", "ready"]
        assert binder.state(Handler).initialized is True

    def test_only_first_instance_is_wired(self):
        adapter = LocalAdapter()
        binder = TypeBinder(adapter=adapter)
        seen = []

        @binder.commandable
        class Handler:
            def __init__(self, name):
                self.name = name

            @command("who")
            def who(self, ctx, usage):
                seen.append(self.name)

        Handler("first")
        Handler("second")
        adapter.run_command("who")
        assert seen == ["first"]

    def test_end_to_end_routing(self):
        adapter = LocalAdapter()
        binder = TypeBinder(adapter=adapter)
        calls = []

        @binder.commandable
        class Handler:
            @command(["foo", "f"])
            def foo(self, ctx, usage, *args):
                calls.append(("foo", ctx, usage, args))

            @command("kick", "admin")
            def kick(self, ctx, usage, *args):
                calls.append(("kick", ctx, usage, args))

            @command(["ban", "b"], "admin")
            def ban(self, ctx, usage, *args):
                calls.append(("ban", ctx, usage, args))

        Handler()
        adapter.run_command("f bar baz", "ctx")
        adapter.run_command("admin ban 5", "ctx")
        adapter.run_command("admin nope", "ctx")

        assert calls == [
            ("foo", "ctx", "Usage /f", ("bar", "baz")),
            ("ban", "ctx", "Usage /admin ban", ("5",)),
        ]
        assert adapter.sent == [
            ("ctx", "Usage /admin kick"),
            ("ctx", "Usage /admin ban"),
            ("ctx", "Usage /admin b"),
        ]

    def test_unresolvable_handler_raises_and_leaves_adapter_untouched(self):
        adapter = Mock()
        binder = TypeBinder(adapter=adapter)

        @binder.commandable
        class Handler:
            def __init__(self):
                self.act = None

            @command("ok")
            def ok(self, ctx, usage):
                pass

            @command("act")
            def act(self, ctx, usage):
                pass

        with pytest.raises(BindingError, match="not callable"):
            Handler()
        adapter.subscribe_command.assert_not_called()
        assert binder.state(Handler).initialized is False

    def test_missing_adapter_raises(self):
        binder = TypeBinder()

        @binder.commandable
        class Handler:
            @command("foo")
            def foo(self, ctx, usage):
                pass

        with pytest.raises(BindingError, match="adapter"):
            Handler()

    def test_attach_adapter_later(self):
        binder = TypeBinder()

        @binder.commandable
        class Handler:
            @command("foo")
            def foo(self, ctx, usage):
                pass

        adapter = Mock()
        binder.attach(adapter)
        Handler()
        assert subscribed_commands(adapter) == ["foo"]

    def test_undecorated_subclass_shares_binding(self):
        adapter = LocalAdapter()
        binder = TypeBinder(adapter=adapter)
        seen = []

        @binder.commandable
        class Base:
            @command("hello")
            def hello(self, ctx, usage):
                seen.append(type(self).__name__)

        class Child(Base):
            pass

        Child()
        Base()
        adapter.run_command("hello")
        assert seen == ["Child"]
        assert Child not in binder._states

    def test_init_wrapper_keeps_metadata(self):
        binder = TypeBinder(adapter=Mock())

        @binder.commandable
        class Handler:
            def __init__(self):
                """Build the handler."""

        assert Handler.__init__.__name__ == "__init__"
        assert Handler.__init__.__doc__ == "Build the handler."

    def test_concurrent_construction_binds_once(self):
        adapter = Mock()
        binder = TypeBinder(adapter=adapter)

        @binder.commandable
        class Handler:
            @command("foo")
            def foo(self, ctx, usage):
                pass

        threads = [threading.Thread(target=Handler) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert adapter.subscribe_command.call_count == 1

    def test_adapter_may_construct_handlers_while_subscribing(self):
        adapter = Mock()
        binder = TypeBinder(adapter=adapter)

        @binder.commandable
        class Handler:
            @command("foo")
            def foo(self, ctx, usage):
                pass

        adapter.subscribe_command.side_effect = lambda name, route: Handler()

        worker = threading.Thread(target=Handler, daemon=True)
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert adapter.subscribe_command.call_count == 1
        assert binder.state(Handler).initialized is True


# ============================================================
# Line mode
# ============================================================

class TestLineMode:

    def test_routes_through_line_event(self):
        adapter = LocalAdapter()
        binder = TypeBinder(adapter=adapter, mode="line")
        calls = []

        @binder.commandable
        class Handler:
            @command(["foo", "f"])
            def foo(self, ctx, usage, *args):
                calls.append(("foo", ctx, usage, args))

            @command("kick", "admin")
            def kick(self, ctx, usage, *args):
                calls.append(("kick", ctx, usage, args))

        Handler()
        assert adapter.commands == {}
        assert len(adapter.events["playerCommand"]) == 2

        adapter.emit("playerCommand", "f x", "ctx")
        adapter.emit("playerCommand", "admin kick bob", "ctx")
        adapter.emit("playerCommand", "unknown stuff", "ctx")

        assert calls == [
            ("foo", "ctx", "Usage /f", ("x",)),
            ("kick", "ctx", "Usage /admin kick", ("bob",)),
        ]

    def test_custom_line_event(self):
        adapter = Mock()
        binder = TypeBinder(adapter=adapter, mode="line", line_event="chat")

        @binder.commandable
        class Handler:
            @command("foo")
            def foo(self, ctx, usage):
                pass

        Handler()
        assert subscribed_events(adapter) == ["chat"]
        adapter.subscribe_command.assert_not_called()


class TestDefaultEngine:

    def test_package_builds_default_binder(self):
        from commandable import binder as default_binder
        from commandable import command_registry, commandable, event_registry

        assert isinstance(default_binder, TypeBinder)
        assert default_binder.commands is command_registry
        assert default_binder.events is event_registry
        assert commandable == default_binder.commandable
