"""
Inbound aggregator messages.

Every frame is a JSON object tagged by ``T``. The closed set of shapes is
modelled as a msgspec tagged union, so a frame is validated and classified
in a single decode call. Unknown fields are ignored; an unknown tag or a
missing required field raises MessageDecodeError.
"""

from typing import Optional, Dict, List, Tuple, Any, Union

import msgspec
from msgspec import Struct, field

from infrastructure.exceptions.feed import MessageDecodeError

from ..enums import AddressUpdateKind, MessageType, SwapKind
from ..structs import AssetPairConfig, OrderBookLevel, OrderInfo, BalanceEntry


class AggregatorMessage(Struct, frozen=True, kw_only=True, tag_field="T"):
    """Base for all inbound messages."""
    pass


class InitMessage(AggregatorMessage, tag=MessageType.INITIALIZATION.value):
    connection_id: Optional[str] = field(default=None, name="i")


class PingPongMessage(AggregatorMessage, tag=MessageType.PING_PONG.value):
    pass


class ErrorMessage(AggregatorMessage, tag=MessageType.ERROR.value):
    message: str = field(name="m")
    code: Optional[Union[int, str]] = field(default=None, name="c")


class AddressUpdateMessage(AggregatorMessage, tag=MessageType.ADDRESS_UPDATE.value):
    address: str = field(name="S")
    kind: AddressUpdateKind = field(name="k")
    balances: Dict[str, BalanceEntry] = field(default_factory=dict, name="b")
    orders: Optional[List[Dict[str, Any]]] = field(default=None, name="o")


class AssetPairsConfigMessage(AggregatorMessage, tag=MessageType.ASSET_PAIRS_CONFIG_UPDATE.value):
    updated_pairs: List[AssetPairConfig] = field(name="u")


class BrokerBalanceMessage(AggregatorMessage, tag=MessageType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATE.value):
    balances: List[Tuple[str, Union[float, str]]] = field(name="bb")


class OrderBookSnapshot(Struct, frozen=True):
    asks: List[OrderBookLevel] = field(default_factory=list, name="a")
    bids: List[OrderBookLevel] = field(default_factory=list, name="b")


class OrderBookMessage(AggregatorMessage, tag=MessageType.AGGREGATED_ORDER_BOOK_UPDATE.value):
    pair: str = field(name="S")
    order_book: OrderBookSnapshot = field(name="ob")


class SwapInfoMessage(AggregatorMessage, tag=MessageType.SWAP_INFO.value):
    kind: SwapKind = field(name="k")
    swap_request_id: str = field(name="S")
    asset_in: str = field(name="ai")
    asset_out: str = field(name="ao")
    amount_in: float = field(name="a")
    amount_out: float = field(name="o")
    min_amount_in: float = field(name="ma")
    min_amount_out: float = field(name="mao")
    path: List[str] = field(name="ps")
    pool_optimal: bool = field(name="po")

    price: Optional[float] = field(default=None, name="p")
    market_price: Optional[float] = field(default=None, name="mp")
    market_amount_out: Optional[float] = field(default=None, name="mo")
    market_amount_in: Optional[float] = field(default=None, name="mi")
    available_amount_in: Optional[float] = field(default=None, name="aa")
    available_amount_out: Optional[float] = field(default=None, name="aao")
    order_info: Optional[OrderInfo] = field(default=None, name="oi")


InboundMessage = Union[
    InitMessage,
    PingPongMessage,
    AddressUpdateMessage,
    AssetPairsConfigMessage,
    BrokerBalanceMessage,
    OrderBookMessage,
    SwapInfoMessage,
    ErrorMessage,
]


class MessageDecoder:
    """Decodes raw frames into one of the InboundMessage shapes."""

    def __init__(self):
        self._decoder = msgspec.json.Decoder(InboundMessage)

    def decode(self, raw: Union[str, bytes]) -> InboundMessage:
        try:
            return self._decoder.decode(raw)
        except msgspec.DecodeError as e:
            raise MessageDecodeError(f"Unrecognized message: {e}", raw) from e
