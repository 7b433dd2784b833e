"""
Networking Infrastructure

Network communication components:
- websocket: connection supervisor, transport and outbound frame queue
"""
