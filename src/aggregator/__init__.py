"""
Aggregator Feed Client

Real-time subscription client for the aggregator WebSocket feed:
order-book updates, address (account) updates, swap quotes, broker
balances and asset-pair configuration.

    from aggregator.ws import AggregatorWebsocket
"""

__version__ = "0.4.0"
