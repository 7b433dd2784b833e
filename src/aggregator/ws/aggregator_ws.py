"""
Aggregator WebSocket client.

Subscribe to aggregator feeds and receive typed callbacks; subscriptions
survive reconnects and are replayed each time the connection opens.

Usage:
    ws = AggregatorWebsocket(config, on_error=print)

    async def on_book(asks, bids, pair):
        ...

    await ws.subscribe(
        SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE,
        AggregatedOrderBookSubscription(payload="ORN-USDT", callback=on_book),
    )
    ...
    await ws.unsubscribe(SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE)
    await ws.destroy()
"""

from typing import Any, Mapping, Optional, Union

from config.structs import AggregatorConfig, WebSocketConfig
from infrastructure.logging import HFTLoggerInterface, get_component_logger
from infrastructure.networking.websocket import ConnectionState, TransportFactory, WebSocketManager

from ..enums import SubscriptionType, SupportedChainId, UnsubscriptionType
from .dispatcher import AggregatorMessageDispatcher, ErrorHandler, Frame
from .subscriptions import (
    Subscription, SubscriptionRegistry,
    build_subscribe_frame, build_unsubscribe_frame,
    classify_unsubscribe_token, unsubscribe_token,
)


class AggregatorWebsocket:
    """Real-time subscription client for one aggregator endpoint."""

    def __init__(
        self,
        config: AggregatorConfig,
        on_error: Optional[ErrorHandler] = None,
        logger: Optional[HFTLoggerInterface] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        config.validate()
        self.config = config
        self.chain_id = config.chain_id
        self.logger = logger or get_component_logger('aggregator.ws', config.chain_id.value)

        self._registry = SubscriptionRegistry()
        self._dispatcher = AggregatorMessageDispatcher(
            registry=self._registry,
            chain_id=self.chain_id,
            send_raw=self.send_raw,
            on_error=on_error,
            logger=self.logger,
        )
        self._ws_manager = WebSocketManager(
            config=config.websocket,
            message_handler=self._dispatcher.dispatch,
            connection_handler=self._on_state_change,
            transport_factory=transport_factory,
            logger=self.logger,
        )

    @classmethod
    def from_url(cls, url: str, chain_id: Union[SupportedChainId, str], **kwargs) -> "AggregatorWebsocket":
        """Client with default connection settings for ``url``."""
        config = AggregatorConfig(
            chain_id=SupportedChainId(chain_id),
            websocket=WebSocketConfig(url=url),
        )
        return cls(config, **kwargs)

    @property
    def subscriptions(self) -> Mapping[SubscriptionType, Subscription]:
        """Read-only view of the registry."""
        return self._registry.view

    @property
    def state(self) -> ConnectionState:
        return self._ws_manager.state

    def is_connected(self) -> bool:
        return self._ws_manager.is_connected()

    async def init(self) -> None:
        """Start connecting. No-op while a connection cycle is already running."""
        await self._ws_manager.initialize()

    async def send(self, data: Any) -> None:
        await self._ws_manager.send_message(data)

    async def send_raw(self, data: Frame) -> None:
        await self._ws_manager.send_raw(data)

    async def subscribe(self, category: Union[SubscriptionType, str], subscription: Subscription) -> None:
        """
        Register ``subscription`` for ``category``, replacing any previous one.

        While the connection is not open the frame is not sent here; the
        replay on the next open delivers it.

        Raises:
            TypeError: If the subscription class does not match the category
        """
        category = SubscriptionType(category)
        self._registry.register(category, subscription)

        if not self._ws_manager.is_active():
            await self.init()

        self.logger.info("Subscribed", channel=category.value,
                         payload=getattr(subscription, "payload", None))
        self.logger.metric("ws_subscriptions", 1, tags={"channel": category.value})

        if self._ws_manager.state == ConnectionState.OPEN:
            await self.send(build_subscribe_frame(category, subscription))

    async def unsubscribe(self, target: Union[SubscriptionType, UnsubscriptionType, str]) -> None:
        """
        Unsubscribe by category or by wire token.

        A SubscriptionType resolves the token from the registered entry. Any
        other string is sent as-is and the matching entry, judged by the
        token's shape, is removed.
        """
        if isinstance(target, SubscriptionType):
            token = unsubscribe_token(target, self._registry.get(target))
            if token is None:
                self.logger.debug("Nothing to unsubscribe", channel=target.value)
                return
            category = target
        else:
            token = target.value if isinstance(target, UnsubscriptionType) else target
            category = classify_unsubscribe_token(token)

        await self.send(build_unsubscribe_frame(token))

        if category is not None:
            self._registry.remove(category)
        self.logger.info("Unsubscribed", token=token,
                         channel=category.value if category else None)

    async def replay_all(self) -> None:
        """Re-send the subscribe frame of every registered entry, in order."""
        frames = self._registry.frames()
        for frame in frames:
            await self.send(frame)
        if frames:
            self.logger.debug("Replayed subscriptions", count=len(frames))

    async def destroy(self) -> None:
        """Close with code 4000 and stop reconnecting. Subscriptions are kept."""
        await self._ws_manager.close()

    async def _on_state_change(self, state: ConnectionState) -> None:
        if state == ConnectionState.OPEN:
            self.logger.info("Aggregator connection established", chain_id=self.chain_id.value)
            await self.replay_all()
        elif state == ConnectionState.CLOSED:
            self.logger.info("Aggregator connection closed", chain_id=self.chain_id.value)

    async def __aenter__(self) -> "AggregatorWebsocket":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.destroy()
