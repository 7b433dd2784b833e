from dataclasses import dataclass
from enum import Enum

from config.structs import WebSocketConfig


# Close code sent by the client on destroy(); the remote side may send it too.
# Either way the supervisor does not reconnect.
CALLER_CLOSE_CODE = 4000


class ConnectionState(Enum):
    """WebSocket connection states"""
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class ReconnectPolicyType(Enum):
    IMMEDIATE = "immediate"
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class ReconnectionPolicy:
    """Delay before the next reconnect attempt (retries are unbounded)."""
    policy_type: ReconnectPolicyType = ReconnectPolicyType.EXPONENTIAL
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 30.0

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds for a zero-based attempt number."""
        if self.policy_type == ReconnectPolicyType.IMMEDIATE:
            return 0.0
        if self.policy_type == ReconnectPolicyType.FIXED:
            return self.initial_delay
        return min(self.initial_delay * (self.backoff_factor ** attempt), self.max_delay)

    @classmethod
    def from_config(cls, config: WebSocketConfig) -> "ReconnectionPolicy":
        return cls(
            policy_type=ReconnectPolicyType(config.reconnect_policy),
            initial_delay=config.reconnect_delay,
            backoff_factor=config.reconnect_backoff,
            max_delay=config.max_reconnect_delay,
        )
