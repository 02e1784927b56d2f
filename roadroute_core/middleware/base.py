"""Middleware Base - Handler chains and parameter validators.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Iterator, List, Optional

logger = logging.getLogger(__name__)

# (ctx, next) -> Any; may return an awaitable
Middleware = Callable[[Any, Callable[[], Awaitable[Any]]], Any]


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class ParamMiddleware:
    """Middleware adapter for a route parameter validator.

    Calls ``fn(value, ctx, next)`` where ``value`` is the current value of
    the tagged parameter in ``ctx.params``.
    """

    def __init__(self, param: str, fn: Callable[..., Any]):
        self.param = param
        self.fn = fn

    def __call__(self, ctx: Any, next: Callable[[], Awaitable[Any]]) -> Any:
        return self.fn(ctx.params.get(self.param), ctx, next)

    def __repr__(self) -> str:
        return f"ParamMiddleware(param={self.param!r}, fn={self.fn!r})"


def compose(middleware: List[Middleware]) -> Callable[..., Awaitable[Any]]:
    """Compose middleware into a single async callable.

    Each middleware receives ``(ctx, next)``; ``next()`` runs the rest of
    the chain and returns an awaitable. The optional ``next`` given to the
    composed callable runs after the last middleware and takes no arguments.

    Pipeline:
    ┌────────────────────────────────────────────────────────────┐
    │                  Middleware Pipeline                        │
    │                                                             │
    │  ctx ──▶ MW1 ──▶ MW2 ──▶ ... ──▶ next()                     │
    │                                    │                        │
    │  result ◀── MW1 ◀── MW2 ◀── ... ◀──┘                        │
    └────────────────────────────────────────────────────────────┘
    """
    chain = list(middleware)

    async def dispatch_chain(
        ctx: Any,
        next: Optional[Callable[[], Any]] = None,
    ) -> Any:
        index = -1

        async def dispatch(i: int) -> Any:
            nonlocal index
            if i <= index:
                raise RuntimeError("next() called multiple times")
            index = i

            if i == len(chain):
                if next is None:
                    return None
                return await _resolve(next())

            return await _resolve(chain[i](ctx, lambda: dispatch(i + 1)))

        return await dispatch(0)

    return dispatch_chain


class MiddlewareChain:
    """Ordered, mutable list of middleware that runs as one unit."""

    def __init__(self, middleware: Optional[List[Middleware]] = None):
        self._middleware = list(middleware or [])

    def add(self, middleware: Middleware) -> "MiddlewareChain":
        """Add middleware to chain."""
        self._middleware.append(middleware)
        return self

    def extend(self, middleware: List[Middleware]) -> "MiddlewareChain":
        """Add several middleware to the chain."""
        self._middleware.extend(middleware)
        return self

    def remove(self, middleware: Middleware) -> bool:
        """Remove middleware from chain."""
        try:
            self._middleware.remove(middleware)
            return True
        except ValueError:
            return False

    async def __call__(
        self,
        ctx: Any,
        next: Optional[Callable[[], Any]] = None,
    ) -> Any:
        return await compose(self._middleware)(ctx, next)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)

    def __len__(self) -> int:
        return len(self._middleware)


__all__ = [
    "Middleware",
    "ParamMiddleware",
    "compose",
    "MiddlewareChain",
]
