"""
Aggregator feed data structures.

Normalized payloads handed to subscription callbacks, plus the swap
subscription request sent to the aggregator. All structures use
msgspec.Struct; wire field names are mapped with ``field(name=...)``.
"""

import uuid
from typing import Optional, Dict, List, Tuple, Any, Union

from msgspec import Struct, field

from .enums import Side, SwapKind, AddressUpdateKind

AssetName = str
PairName = str

# [tradable, reserved, contract, wallet, allowance]
BalanceEntry = Tuple[str, str, str, str, str]


class SwapSubscriptionRequest(Struct, frozen=True, omit_defaults=True):
    """Swap quote stream request; ``is_amount_in`` omitted means amount is amount-in."""
    swap_request_id: str = field(name="d")
    asset_in: AssetName = field(name="i")
    asset_out: AssetName = field(name="o")
    amount: float = field(name="a")
    is_amount_in: Optional[bool] = field(default=None, name="e")

    @classmethod
    def create(cls, asset_in: AssetName, asset_out: AssetName, amount: float,
               is_amount_in: Optional[bool] = None) -> "SwapSubscriptionRequest":
        """New request with a client-generated UUID."""
        return cls(
            swap_request_id=str(uuid.uuid4()),
            asset_in=asset_in,
            asset_out=asset_out,
            amount=amount,
            is_amount_in=is_amount_in,
        )


class OrderInfo(Struct, frozen=True):
    """Order that would be placed to execute a swap quote."""
    pair: PairName = field(name="p")
    side: Side = field(name="s")
    amount: float = field(name="a")
    safe_price: float = field(name="sp")


class SwapInfo(Struct, frozen=True, kw_only=True):
    """Common part of both swap quote kinds."""
    kind: SwapKind
    swap_request_id: str
    asset_in: AssetName
    asset_out: AssetName
    amount_in: float
    amount_out: float
    min_amount_in: float
    min_amount_out: float

    path: List[AssetName]
    pool_optimal: bool

    price: Optional[float] = None
    market_price: Optional[float] = None
    order_info: Optional[OrderInfo] = None


class SwapInfoByAmountIn(SwapInfo, frozen=True, kw_only=True):
    """Quote for an exact spend (``kind == exactSpend``)."""
    available_amount_in: Optional[float] = None
    market_amount_out: Optional[float] = None


class SwapInfoByAmountOut(SwapInfo, frozen=True, kw_only=True):
    """Quote for an exact receive (``kind == exactReceive``)."""
    market_amount_in: Optional[float] = None
    available_amount_out: Optional[float] = None


class OrderBookLevel(Struct, frozen=True, array_like=True):
    """Aggregated price level: ``[price, amount, exchanges, [[side, pair], ...]]``."""
    price: Union[float, str]
    amount: Union[float, str]
    exchanges: List[str]
    paths: List[Tuple[str, PairName]] = []


class AssetPairConfig(Struct, frozen=True, array_like=True):
    """Pair configuration entry: ``[pair, minQty, pricePrecision]``."""
    pair: PairName
    min_qty: float
    price_precision: int


class BrokerBalance(Struct, frozen=True):
    """Broker balance entry; the balance is kept as sent (number or decimal string)."""
    asset: AssetName
    balance: Union[float, str]


class AddressUpdate(Struct):
    """
    Account update for a subscribed address.

    Initial snapshots (``kind == i``) carry ``full_orders``; incremental
    updates (``kind == u``) carry the first changed order in ``order_update``.
    Orders are forwarded as received.
    """
    kind: AddressUpdateKind
    address: str
    balances: Dict[AssetName, BalanceEntry] = {}
    full_orders: Optional[List[Dict[str, Any]]] = None
    order_update: Optional[Dict[str, Any]] = None

    @property
    def is_initial(self) -> bool:
        return self.kind == AddressUpdateKind.INITIAL
