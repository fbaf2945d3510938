from __future__ import annotations


class BotError(Exception):
    """Base class for all errors raised by the bot core and its collaborators."""


class StorageError(BotError):
    """Read or write against persistent state failed."""


class FetchError(BotError):
    """Directory lookup failed (network, HTTP status or payload decoding)."""


class ValidationError(BotError):
    """User input could not be accepted."""


class ConfigurationError(BotError, RuntimeError):
    """Required startup parameter is missing or malformed."""
