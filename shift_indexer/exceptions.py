"""
Exception hierarchy for the projection engine.
"""


class IndexerError(Exception):
    """Base exception for indexer errors."""
    pass


class EventDecodeError(IndexerError):
    """Raised when a raw event or one of its arguments cannot be decoded."""
    pass


class StoreError(IndexerError):
    """Raised when a derived-store write fails and the event must be retried."""
    pass


class ConfigurationError(IndexerError):
    """Raised when the indexer configuration is invalid."""
    pass
