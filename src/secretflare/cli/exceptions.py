__all__ = ["CliError", "ConfigError", "InputError"]


class CliError(Exception):
    """Base class for errors raised by the command layer."""


class ConfigError(CliError):
    """Configuration is missing or invalid."""


class InputError(CliError):
    """Secret input could not be read or parsed."""
