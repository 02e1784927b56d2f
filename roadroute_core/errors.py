"""Routing errors.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations


class RoutingError(Exception):
    """Base class for routing errors."""
    pass


class ConfigurationError(RoutingError):
    """Raised when a route is registered with invalid middleware."""
    pass


class BuildError(RoutingError, TypeError):
    """Raised when a URL cannot be built from the given parameters."""
    pass


class RouteNotFoundError(RoutingError, LookupError):
    """Raised when no route is registered under a name."""
    pass


__all__ = [
    "RoutingError",
    "ConfigurationError",
    "BuildError",
    "RouteNotFoundError",
]
