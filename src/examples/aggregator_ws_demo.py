#!/usr/bin/env python3
"""
Aggregator WebSocket Demo

Streams aggregated order-book updates for a pair (and optionally address
updates and broker balances) for a number of seconds, then destroys the client.

Usage:
    python src/examples/aggregator_ws_demo.py ORN-USDT --seconds 30
    python src/examples/aggregator_ws_demo.py ORN-USDT --address 0xabc... --broker
    python src/examples/aggregator_ws_demo.py ORN-USDT --url wss://aggregator.example/v1 --chain 56
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from aggregator.enums import SubscriptionType, SupportedChainId
from aggregator.structs import AddressUpdate
from aggregator.ws import (
    AggregatorWebsocket,
    AggregatedOrderBookSubscription,
    AddressUpdateSubscription,
    BrokerBalanceSubscription,
)
from config.config_manager import load_aggregator_config
from infrastructure.exceptions.feed import ConfigurationError
from infrastructure.logging import get_logger

logger = get_logger('examples.aggregator_ws_demo')


def on_order_book(asks, bids, pair: str) -> None:
    best_ask = asks[0].price if asks else None
    best_bid = bids[0].price if bids else None
    print(f"[{pair}] bid={best_bid} ask={best_ask} levels={len(bids)}/{len(asks)}")


async def on_address_update(update: AddressUpdate) -> None:
    if update.is_initial:
        print(f"[{update.address}] snapshot: {len(update.full_orders or [])} orders, "
              f"{len(update.balances)} balances")
    else:
        print(f"[{update.address}] order update: {update.order_update}")


def on_broker_balances(balances) -> None:
    print("broker balances: " + ", ".join(f"{b.asset}={b.balance}" for b in balances))


def on_error(message: str) -> None:
    logger.error("Aggregator reported error", error_message=message)


def build_client(args) -> AggregatorWebsocket:
    if args.url:
        return AggregatorWebsocket.from_url(args.url, SupportedChainId(args.chain), on_error=on_error)
    return AggregatorWebsocket(load_aggregator_config(args.config), on_error=on_error)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Aggregator WebSocket feed demo")
    parser.add_argument("pair", help="Pair name, e.g. ORN-USDT")
    parser.add_argument("--seconds", "-s", type=float, default=30.0, help="How long to stream")
    parser.add_argument("--address", "-a", help="Also subscribe to updates for this address")
    parser.add_argument("--broker", action="store_true", help="Also subscribe to broker balances")
    parser.add_argument("--config", "-c", help="Path to config.yaml")
    parser.add_argument("--url", help="Endpoint URL (overrides config.yaml)")
    parser.add_argument("--chain", default=SupportedChainId.BSC.value, help="Chain id used with --url")
    args = parser.parse_args()

    try:
        client = build_client(args)
    except (ConfigurationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    async with client:
        await client.subscribe(
            SubscriptionType.AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE,
            AggregatedOrderBookSubscription(payload=args.pair, callback=on_order_book),
        )
        if args.address:
            await client.subscribe(
                SubscriptionType.ADDRESS_UPDATES_SUBSCRIBE,
                AddressUpdateSubscription(payload=args.address, callback=on_address_update),
            )
        if args.broker:
            await client.subscribe(
                SubscriptionType.BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE,
                BrokerBalanceSubscription(callback=on_broker_balances),
            )

        await asyncio.sleep(args.seconds)

        for category in list(client.subscriptions):
            await client.unsubscribe(category)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
