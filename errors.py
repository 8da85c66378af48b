"""Exceptions raised by SwitchSync."""


class ConfigurationError(ValueError):
    """Invalid switch group registration (unknown vendor, duplicate switch, ...)."""
