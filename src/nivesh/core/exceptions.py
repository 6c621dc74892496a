"""
Nivesh exception hierarchy.

All nivesh exceptions inherit from NiveshError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
Missing market data is not an error: the engine degrades to partial results.
"""


class NiveshError(Exception):
    """Base exception class for all nivesh errors."""


class ConfigurationError(NiveshError):
    """Raised for configuration errors (missing keys, invalid values)."""


class DataSourceError(NiveshError):
    """Raised when a data source or rate provider cannot answer a query."""


class SnapshotError(DataSourceError):
    """Raised when a portfolio snapshot file cannot be parsed."""
