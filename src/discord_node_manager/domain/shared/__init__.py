"""
Shared Domain Kernel

Contains types, events and exceptions shared across all bounded contexts.
"""

from discord_node_manager.domain.shared.exceptions import (
    ConfigurationError,
    DomainError,
    InvalidOperationError,
    NodeConnectionError,
    ProtocolError,
    RequestError,
)

__all__ = [
    "DomainError",
    "ConfigurationError",
    "InvalidOperationError",
    "NodeConnectionError",
    "ProtocolError",
    "RequestError",
]
