"""
Infrastructure Components

Foundational services for the aggregator feed client:
- networking: WebSocket transport, connection supervision and reconnection
- logging: structured logging with keyword context and metrics
- exceptions: feed-wide exception definitions
"""
