from .aggregator_ws import AggregatorWebsocket
from .dispatcher import AggregatorMessageDispatcher
from .messages import MessageDecoder
from .subscriptions import (
    AddressUpdateSubscription,
    AggregatedOrderBookSubscription,
    AssetPairsConfigSubscription,
    BrokerBalanceSubscription,
    SwapInfoSubscription,
    SubscriptionRegistry,
    classify_unsubscribe_token,
)

__all__ = [
    "AggregatorWebsocket",
    "AggregatorMessageDispatcher",
    "MessageDecoder",
    "AddressUpdateSubscription",
    "AggregatedOrderBookSubscription",
    "AssetPairsConfigSubscription",
    "BrokerBalanceSubscription",
    "SwapInfoSubscription",
    "SubscriptionRegistry",
    "classify_unsubscribe_token",
]
