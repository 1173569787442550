"""Exception hierarchy."""


class SafeMongoError(Exception):
    """Base class for all safemongo errors."""


class RuleError(SafeMongoError):
    """Raised when a single rule definition is malformed."""


class CatalogError(SafeMongoError):
    """Raised when a rule collection violates its invariants (empty or duplicate ids)."""


class ConfigError(SafeMongoError):
    """Raised when config is malformed or unreadable."""
