"""
Aggregator message dispatcher.

Decodes each raw frame and routes it to the callback registered for its
category, normalizing the payload on the way. Frames for categories without
a subscription are dropped.
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from infrastructure.exceptions.feed import MessageDecodeError
from infrastructure.logging import HFTLoggerInterface, get_logger

from ..enums import AddressUpdateKind, SubscriptionType, SupportedChainId, SwapKind
from ..structs import AddressUpdate, BrokerBalance, SwapInfo, SwapInfoByAmountIn, SwapInfoByAmountOut
from .messages import (
    AddressUpdateMessage, AssetPairsConfigMessage, BrokerBalanceMessage, ErrorMessage,
    InitMessage, MessageDecoder, OrderBookMessage, PingPongMessage, SwapInfoMessage,
)
from .subscriptions import SubscriptionRegistry

Frame = Union[str, bytes]
ErrorHandler = Callable[[str], Union[None, Awaitable[None]]]


async def invoke_callback(callback: Callable[..., Any], *args) -> None:
    """Call a plain or coroutine callback, awaiting the result if needed."""
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


def normalize_swap_info(message: SwapInfoMessage) -> Optional[SwapInfo]:
    common = dict(
        kind=message.kind,
        swap_request_id=message.swap_request_id,
        asset_in=message.asset_in,
        asset_out=message.asset_out,
        amount_in=message.amount_in,
        amount_out=message.amount_out,
        min_amount_in=message.min_amount_in,
        min_amount_out=message.min_amount_out,
        path=message.path,
        pool_optimal=message.pool_optimal,
        price=message.price,
        market_price=message.market_price,
        order_info=message.order_info,
    )
    if message.kind == SwapKind.EXACT_SPEND:
        return SwapInfoByAmountIn(
            available_amount_in=message.available_amount_in,
            market_amount_out=message.market_amount_out,
            **common,
        )
    if message.kind == SwapKind.EXACT_RECEIVE:
        return SwapInfoByAmountOut(
            market_amount_in=message.market_amount_in,
            available_amount_out=message.available_amount_out,
            **common,
        )
    return None


def normalize_address_update(message: AddressUpdateMessage) -> Optional[AddressUpdate]:
    if message.kind == AddressUpdateKind.INITIAL:
        return AddressUpdate(
            kind=message.kind,
            address=message.address,
            balances=message.balances,
            full_orders=message.orders,
        )
    if message.kind == AddressUpdateKind.UPDATE:
        # Only the first order of an incremental update is forwarded
        return AddressUpdate(
            kind=message.kind,
            address=message.address,
            balances=message.balances,
            order_update=message.orders[0] if message.orders else None,
        )
    return None


class AggregatorMessageDispatcher:
    """Routes decoded aggregator messages to registry callbacks."""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        chain_id: SupportedChainId,
        send_raw: Callable[[Frame], Awaitable[None]],
        on_error: Optional[ErrorHandler] = None,
        logger: Optional[HFTLoggerInterface] = None,
        decoder: Optional[MessageDecoder] = None,
    ):
        self.registry = registry
        self.chain_id = chain_id
        self._send_raw = send_raw
        self.on_error = on_error
        self.logger = logger or get_logger('aggregator.ws.dispatcher')
        self._decoder = decoder or MessageDecoder()

    async def dispatch(self, raw: Frame) -> None:
        try:
            message = self._decoder.decode(raw)
        except MessageDecodeError as e:
            self.logger.warning("Dropping undecodable message",
                                error_message=e.message,
                                preview=e.preview)
            self.logger.metric("ws_decode_errors", 1, tags={"chain": self.chain_id.value})
            return

        if isinstance(message, ErrorMessage):
            await self._handle_error(message)
        elif isinstance(message, PingPongMessage):
            # Echo the exact bytes received
            await self._send_raw(raw)
        elif isinstance(message, SwapInfoMessage):
            await self._handle_swap_info(message)
        elif isinstance(message, OrderBookMessage):
            await self._handle_order_book(message)
        elif isinstance(message, AssetPairsConfigMessage):
            await self._handle_pairs_config(message)
        elif isinstance(message, AddressUpdateMessage):
            await self._handle_address_update(message)
        elif isinstance(message, BrokerBalanceMessage):
            await self._handle_broker_balances(message)
        elif isinstance(message, InitMessage):
            self.logger.debug("Aggregator connection initialized",
                              connection_id=message.connection_id)

    async def _handle_error(self, message: ErrorMessage) -> None:
        if self.on_error is None:
            self.logger.error("Aggregator error",
                              error_message=message.message,
                              error_code=message.code)
            return
        await invoke_callback(self.on_error, message.message)

    async def _handle_swap_info(self, message: SwapInfoMessage) -> None:
        subscription = self.registry.get(SubscriptionType.SWAP_SUBSCRIBE)
        if subscription is None:
            return
        swap_info = normalize_swap_info(message)
        if swap_info is not None:
            await invoke_callback(subscription.callback, swap_info)

    async def _handle_order_book(self, message: OrderBookMessage) -> None:
        subscription = self.registry.get(SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE)
        if subscription is None:
            return
        book = message.order_book
        await invoke_callback(subscription.callback, book.asks, book.bids, message.pair)

    async def _handle_pairs_config(self, message: AssetPairsConfigMessage) -> None:
        subscription = self.registry.get(SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE)
        if subscription is None:
            return
        await invoke_callback(subscription.callback, self.chain_id, message.updated_pairs)

    async def _handle_address_update(self, message: AddressUpdateMessage) -> None:
        subscription = self.registry.get(SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE)
        if subscription is None:
            return
        update = normalize_address_update(message)
        if update is not None:
            await invoke_callback(subscription.callback, update)

    async def _handle_broker_balances(self, message: BrokerBalanceMessage) -> None:
        subscription = self.registry.get(
            SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE
        )
        if subscription is None:
            return
        balances = [BrokerBalance(asset=asset, balance=balance) for asset, balance in message.balances]
        await invoke_callback(subscription.callback, balances)
