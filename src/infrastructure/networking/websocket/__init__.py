from .structs import ConnectionState, ReconnectionPolicy, ReconnectPolicyType, CALLER_CLOSE_CODE
from .transport import Transport, TransportFactory, WebsocketTransport
from .frame_queue import PendingFrameQueue
from .ws_manager import WebSocketManager

__all__ = [
    "ConnectionState",
    "ReconnectionPolicy",
    "ReconnectPolicyType",
    "CALLER_CLOSE_CODE",
    "Transport",
    "TransportFactory",
    "WebsocketTransport",
    "PendingFrameQueue",
    "WebSocketManager",
]
