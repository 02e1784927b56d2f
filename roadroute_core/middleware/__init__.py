"""Middleware module - Handler chains and request logging."""

from roadroute_core.middleware.base import (
    Middleware,
    MiddlewareChain,
    ParamMiddleware,
    compose,
)
from roadroute_core.middleware.logging import LoggingConfig, LoggingMiddleware

__all__ = [
    "Middleware",
    "MiddlewareChain",
    "ParamMiddleware",
    "compose",
    "LoggingConfig",
    "LoggingMiddleware",
]
