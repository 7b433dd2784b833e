from typing import Optional, Dict, Any
from msgspec import Struct

from aggregator.enums import SupportedChainId


RECONNECT_POLICIES = ("immediate", "fixed", "exponential")


class WebSocketConfig(Struct, frozen=True):
    """
    WebSocket connection, reconnection and outbound queue settings.

    Attributes:
        # Connection settings
        url: WebSocket URL (ws:// or wss://)
        connect_timeout: Opening handshake timeout in seconds
        ping_interval: Protocol-level ping interval in seconds (None disables)
        ping_timeout: Protocol-level ping timeout in seconds
        close_timeout: Connection close timeout in seconds

        # Reconnection settings (retries are unbounded)
        reconnect_policy: "immediate", "fixed" or "exponential"
        reconnect_delay: Base delay between reconnection attempts in seconds
        reconnect_backoff: Backoff multiplier for the exponential policy
        max_reconnect_delay: Cap for the exponential policy in seconds

        # Outbound queue / performance settings
        max_pending_frames: Frames kept while connecting; oldest dropped beyond this
        max_message_size: Maximum inbound message size in bytes
        max_queue_size: Maximum inbound frames buffered by the transport
    """
    url: str

    connect_timeout: float = 10.0
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 10.0
    close_timeout: float = 5.0

    reconnect_policy: str = "exponential"
    reconnect_delay: float = 0.5
    reconnect_backoff: float = 2.0
    max_reconnect_delay: float = 30.0

    max_pending_frames: int = 1000
    max_message_size: int = 1048576  # 1MB
    max_queue_size: int = 1000

    def validate(self) -> None:
        """Validate WebSocket configuration."""
        if not (self.url.startswith('ws://') or self.url.startswith('wss://')):
            raise ValueError(f"url must start with ws:// or wss://, got: {self.url}")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.reconnect_policy not in RECONNECT_POLICIES:
            raise ValueError(f"reconnect_policy must be one of {RECONNECT_POLICIES}")
        if self.reconnect_delay < 0:
            raise ValueError("reconnect_delay cannot be negative")
        if self.reconnect_backoff < 1.0:
            raise ValueError("reconnect_backoff must be >= 1.0")
        if self.max_reconnect_delay < self.reconnect_delay:
            raise ValueError("max_reconnect_delay must be >= reconnect_delay")
        if self.max_pending_frames <= 0:
            raise ValueError("max_pending_frames must be positive")


class AggregatorConfig(Struct, frozen=True):
    """
    Aggregator feed client configuration.

    Attributes:
        chain_id: Chain the aggregator serves; tags config-update callbacks
        websocket: Connection settings including the endpoint URL
        name: Name used in log records
    """
    chain_id: SupportedChainId
    websocket: WebSocketConfig
    name: str = "aggregator"

    def validate(self) -> None:
        self.websocket.validate()

    def to_dict(self) -> Dict[str, Any]:
        import msgspec
        return msgspec.structs.asdict(self)
