"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Node (aiohttp socket, httpx REST client)
- Discord (bot wiring for gateway events)
"""
