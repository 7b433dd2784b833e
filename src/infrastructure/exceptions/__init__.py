from .feed import (
    FeedError,
    ConfigurationError,
    MessageDecodeError,
    TransportError,
    TransportConnectionError,
    TransportClosedError,
)

__all__ = [
    'FeedError',
    'ConfigurationError',
    'MessageDecodeError',
    'TransportError',
    'TransportConnectionError',
    'TransportClosedError',
]
