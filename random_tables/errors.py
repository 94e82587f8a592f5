"""Error taxonomy shared by the engine, storage and transport layers."""


class RandomTablesError(Exception):
    """Base class for all errors raised by random_tables."""


class InvalidArgumentError(RandomTablesError, ValueError):
    """Raised when a request is rejected before any work begins."""


class NotFoundError(RandomTablesError, LookupError):
    """Raised when a table, template or entry id does not exist."""


class EmptyTableError(RandomTablesError):
    """Raised when rolling on a table that has no entries."""


class ConfigError(RandomTablesError):
    """Raised when the environment configuration is invalid."""
