"""
Exceptions raised by the command/event engine.

Registration and binding errors are programmer errors. They are
raised while handler classes are being defined or first constructed,
and are meant to stop start-up rather than be caught and ignored.
"""


class CommandableError(Exception):
    """Base class for all engine errors."""


class RegistrationError(CommandableError, ValueError):
    """A command or event declaration is structurally invalid.

    Raised for an empty main name, an alias that is already taken,
    a duplicate subcommand inside a group, a group name that clashes
    with a plain command, or a handler that is not callable.
    """


class BindingError(CommandableError, RuntimeError):
    """A declared handler could not be wired to a live instance."""


class ConfigError(CommandableError, ValueError):
    """A configuration value is out of range or unknown."""
