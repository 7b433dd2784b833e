"""
Subscription registry and unsubscribe-token classification.

The registry keeps at most one subscription per category, in insertion
order, and survives reconnects and destroy(). Its entries are replayed
verbatim every time the connection opens.
"""

import uuid
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..enums import SubscriptionType, UnsubscriptionType, SupportedChainId, UNSUBSCRIBE
from ..structs import (
    AddressUpdate, AssetPairConfig, BrokerBalance, OrderBookLevel,
    SwapInfo, SwapSubscriptionRequest,
)


@dataclass
class AddressUpdateSubscription:
    payload: str
    callback: Callable[[AddressUpdate], Union[None, Awaitable[None]]]


@dataclass
class AggregatedOrderBookSubscription:
    payload: str
    callback: Callable[[List[OrderBookLevel], List[OrderBookLevel], str], Union[None, Awaitable[None]]]


@dataclass
class AssetPairsConfigSubscription:
    callback: Callable[[SupportedChainId, List[AssetPairConfig]], Union[None, Awaitable[None]]]


@dataclass
class BrokerBalanceSubscription:
    callback: Callable[[List[BrokerBalance]], Union[None, Awaitable[None]]]


@dataclass
class SwapInfoSubscription:
    payload: SwapSubscriptionRequest
    callback: Callable[[SwapInfo], Union[None, Awaitable[None]]]


Subscription = Union[
    AddressUpdateSubscription,
    AggregatedOrderBookSubscription,
    AssetPairsConfigSubscription,
    BrokerBalanceSubscription,
    SwapInfoSubscription,
]

SUBSCRIPTION_CLASSES = {
    SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE: AddressUpdateSubscription,
    SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE: AggregatedOrderBookSubscription,
    SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE: AssetPairsConfigSubscription,
    SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE: BrokerBalanceSubscription,
    SubscriptionType.SWAP_SUBSCRIBE: SwapInfoSubscription,
}

# Categories without a payload are unsubscribed with a fixed token
UNSUBSCRIBE_SENTINELS = {
    SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE:
        UnsubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_UNSUBSCRIBE,
    SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE:
        UnsubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_UNSUBSCRIBE,
}


def build_subscribe_frame(category: SubscriptionType, subscription: Subscription) -> Dict[str, Any]:
    """``{"T": category}`` plus ``"S": payload`` for categories that carry one."""
    frame: Dict[str, Any] = {"T": category.value}
    payload = getattr(subscription, "payload", None)
    if payload is not None:
        frame["S"] = payload
    return frame


def build_unsubscribe_frame(token: str) -> Dict[str, Any]:
    return {"T": UNSUBSCRIBE, "S": token}


def unsubscribe_token(category: SubscriptionType, subscription: Optional[Subscription]) -> Optional[str]:
    """Token identifying a registered subscription on the wire, or None if there is none."""
    sentinel = UNSUBSCRIBE_SENTINELS.get(category)
    if sentinel is not None:
        return sentinel.value
    if subscription is None:
        return None
    payload = subscription.payload
    if isinstance(payload, SwapSubscriptionRequest):
        return payload.swap_request_id
    return payload


def _is_address(token: str) -> bool:
    return "0x" in token


def _is_uuid(token: str) -> bool:
    try:
        parsed = uuid.UUID(token)
    except ValueError:
        return False
    # Only the canonical hyphenated form counts
    if str(parsed) != token.lower():
        return False
    if parsed.int == 0:
        return True
    return parsed.variant == uuid.RFC_4122 and parsed.version in (1, 2, 3, 4, 5)


def _is_pair_name(token: str) -> bool:
    return "-" in token and len(token.split("-")) == 2


# Ordered; first match wins. A UUID contains hyphens, so it is tested
# before the pair-name rule.
_UNSUBSCRIBE_RULES: Tuple[Tuple[Callable[[str], bool], SubscriptionType], ...] = (
    (_is_address, SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE),
    (_is_uuid, SubscriptionType.SWAP_SUBSCRIBE),
    (_is_pair_name, SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE),
    (lambda token: token == UnsubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_UNSUBSCRIBE.value,
     SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE),
    (lambda token: token == UnsubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_UNSUBSCRIBE.value,
     SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE),
)


def classify_unsubscribe_token(token: str) -> Optional[SubscriptionType]:
    """Category an unsubscribe token refers to, judged by its shape alone."""
    for matches, category in _UNSUBSCRIBE_RULES:
        if matches(token):
            return category
    return None


class SubscriptionRegistry:
    """At most one subscription per category, kept in insertion order."""

    def __init__(self):
        self._subscriptions: Dict[SubscriptionType, Subscription] = {}

    def register(self, category: SubscriptionType, subscription: Subscription) -> None:
        """Store or overwrite the entry for ``category``.

        Raises:
            TypeError: If the subscription class does not match the category
        """
        expected = SUBSCRIPTION_CLASSES[category]
        if not isinstance(subscription, expected):
            raise TypeError(
                f"{category.name} expects {expected.__name__}, got {type(subscription).__name__}"
            )
        # Overwriting keeps the original position, so replay order is stable
        self._subscriptions[category] = subscription

    def remove(self, category: SubscriptionType) -> Optional[Subscription]:
        return self._subscriptions.pop(category, None)

    def get(self, category: SubscriptionType) -> Optional[Subscription]:
        return self._subscriptions.get(category)

    def frames(self) -> List[Dict[str, Any]]:
        """Subscribe frames for every entry, in stored order."""
        return [build_subscribe_frame(category, subscription)
                for category, subscription in self._subscriptions.items()]

    @property
    def view(self) -> Mapping[SubscriptionType, Subscription]:
        return MappingProxyType(self._subscriptions)

    def __contains__(self, category: object) -> bool:
        return category in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __iter__(self):
        return iter(self._subscriptions)
