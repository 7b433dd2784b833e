from typing import Optional, Union


class FeedError(Exception):
    """Base exception for all aggregator feed errors."""
    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class ConfigurationError(FeedError):
    """Configuration-specific exception for setup errors."""

    def __init__(self, message: str, setting_name: Optional[str] = None):
        self.setting_name = setting_name
        super().__init__(400, message)


# Protocol errors (message is dropped, connection survives)
class MessageDecodeError(FeedError):
    """Inbound frame matches none of the known message shapes."""

    def __init__(self, message: str, raw: Union[str, bytes, None] = None):
        self.raw = raw
        super().__init__(422, message)

    @property
    def preview(self) -> str:
        if self.raw is None:
            return ""
        text = self.raw if isinstance(self.raw, str) else self.raw.decode("utf-8", errors="replace")
        return text[:100] + "..." if len(text) > 100 else text


# Transport errors (handled by reconnection, never surfaced to callers)
class TransportError(FeedError):
    """Base class for transport-layer failures."""
    def __init__(self, message: str, code: int = 500) -> None:
        super().__init__(code, message)


class TransportConnectionError(TransportError):
    """The transport could not establish a connection."""
    pass


class TransportClosedError(TransportError):
    """The connection was closed; ``close_code`` is None for code-less closure."""

    def __init__(self, close_code: Optional[int] = None, reason: str = ""):
        self.close_code = close_code
        self.reason = reason
        super().__init__(f"Connection closed (code={close_code}, reason={reason or 'n/a'})", 503)
