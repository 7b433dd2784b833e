import uuid
from unittest.mock import Mock

import pytest

from aggregator.enums import SubscriptionType, UnsubscriptionType
from aggregator.structs import SwapSubscriptionRequest
from aggregator.ws.subscriptions import (
    AddressUpdateSubscription,
    AggregatedOrderBookSubscription,
    AssetPairsConfigSubscription,
    BrokerBalanceSubscription,
    SubscriptionRegistry,
    SwapInfoSubscription,
    build_subscribe_frame,
    classify_unsubscribe_token,
    unsubscribe_token,
)


class TestClassifyUnsubscribeToken:

    @pytest.mark.parametrize("token, expected", [
        ("0x1234abcd", SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE),
        ("0xab-cd", SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE),
        ("3f1c2a5e-8d4b-4c1a-9e2f-7b6a5d4c3b2a", SubscriptionType.SWAP_SUBSCRIBE),
        ("3F1C2A5E-8D4B-4C1A-9E2F-7B6A5D4C3B2A", SubscriptionType.SWAP_SUBSCRIBE),
        ("00000000-0000-0000-0000-000000000000", SubscriptionType.SWAP_SUBSCRIBE),
        ("ORN-USDT", SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE),
        ("apcu", SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE),
        ("btasabu", SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE),
    ])
    def test_known_shapes(self, token, expected):
        assert classify_unsubscribe_token(token) == expected

    @pytest.mark.parametrize("token", [
        "",
        "ORNUSDT",
        "A-B-C",
        "aus",
        "3f1c2a5e8d4b4c1a9e2f7b6a5d4c3b2a",
        "{3f1c2a5e-8d4b-4c1a-9e2f-7b6a5d4c3b2a}",
    ])
    def test_unrecognized_shapes(self, token):
        assert classify_unsubscribe_token(token) is None

    def test_uuid_with_unsupported_version_is_not_a_swap_id(self):
        # Version 6 with the RFC 4122 variant: five hyphen parts, so no rule matches
        assert classify_unsubscribe_token("3f1c2a5e-8d4b-6c1a-9e2f-7b6a5d4c3b2a") is None

    def test_generated_request_ids_classify_as_swap(self):
        request = SwapSubscriptionRequest.create("ORN", "USDT", 1)

        assert classify_unsubscribe_token(request.swap_request_id) == SubscriptionType.SWAP_SUBSCRIBE
        assert uuid.UUID(request.swap_request_id).version == 4

    def test_independent_of_registry_contents(self):
        registry = SubscriptionRegistry()

        assert classify_unsubscribe_token("ORN-USDT") == SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE
        assert len(registry) == 0


class TestSubscriptionRegistry:

    def test_register_and_get(self):
        registry = SubscriptionRegistry()
        subscription = BrokerBalanceSubscription(callback=Mock())

        registry.register(SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE,
                          subscription)

        assert registry.get(SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE) \
            is subscription
        assert SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE in registry

    def test_overwrite_keeps_replay_order(self):
        registry = SubscriptionRegistry()
        registry.register(SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE,
                          AggregatedOrderBookSubscription(payload="ORN-USDT", callback=Mock()))
        registry.register(SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE,
                          AddressUpdateSubscription(payload="0xabc", callback=Mock()))
        registry.register(SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE,
                          AggregatedOrderBookSubscription(payload="ETH-USDT", callback=Mock()))

        assert registry.frames() == [
            {"T": "aobus", "S": "ETH-USDT"},
            {"T": "aus", "S": "0xabc"},
        ]
        assert len(registry) == 2

    def test_mismatched_class_raises(self):
        registry = SubscriptionRegistry()

        with pytest.raises(TypeError):
            registry.register(SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE,
                              AssetPairsConfigSubscription(callback=Mock()))
        assert len(registry) == 0

    def test_remove(self):
        registry = SubscriptionRegistry()
        registry.register(SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE,
                          AssetPairsConfigSubscription(callback=Mock()))

        assert registry.remove(SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE) is not None
        assert registry.remove(SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE) is None
        assert len(registry) == 0

    def test_view_is_read_only(self):
        registry = SubscriptionRegistry()

        with pytest.raises(TypeError):
            registry.view[SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE] = Mock()


class TestFrames:

    def test_payloadless_frame(self):
        frame = build_subscribe_frame(SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE,
                                      AssetPairsConfigSubscription(callback=Mock()))

        assert frame == {"T": "apcus"}

    def test_swap_frame_carries_request(self):
        request = SwapSubscriptionRequest.create("ORN", "USDT", 1)

        frame = build_subscribe_frame(SubscriptionType.SWAP_SUBSCRIBE,
                                      SwapInfoSubscription(payload=request, callback=Mock()))

        assert frame == {"T": "ss", "S": request}

    @pytest.mark.parametrize("category, subscription, expected", [
        (SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE,
         AddressUpdateSubscription(payload="0xabc", callback=Mock()), "0xabc"),
        (SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE,
         AggregatedOrderBookSubscription(payload="ORN-USDT", callback=Mock()), "ORN-USDT"),
        (SubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE, None,
         UnsubscriptionType.ASSET_PAIRS_CONFIG_UPDATES_UNSUBSCRIBE.value),
        (SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE, None,
         UnsubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_UNSUBSCRIBE.value),
        (SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE, None, None),
    ])
    def test_unsubscribe_token(self, category, subscription, expected):
        assert unsubscribe_token(category, subscription) == expected

    def test_unsubscribe_token_for_swap_is_request_id(self):
        request = SwapSubscriptionRequest.create("ORN", "USDT", 1)
        subscription = SwapInfoSubscription(payload=request, callback=Mock())

        assert unsubscribe_token(SubscriptionType.SWAP_SUBSCRIBE, subscription) == request.swap_request_id
