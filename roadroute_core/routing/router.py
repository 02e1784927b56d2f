"""Router - Route table built from layers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from roadroute_core.errors import RouteNotFoundError
from roadroute_core.middleware.base import Middleware, MiddlewareChain
from roadroute_core.middleware.logging import LoggingConfig, LoggingMiddleware
from roadroute_core.routing.context import Context
from roadroute_core.routing.layer import Layer, LayerOptions
from roadroute_core.utils.config import RouterConfig

logger = logging.getLogger(__name__)


@dataclass
class RouteMatch:
    """Layers matching a request."""

    path: List[Layer] = field(default_factory=list)
    path_and_method: List[Layer] = field(default_factory=list)
    route: bool = False


class Router:
    """Request Router.

    Features:
    - Pattern-based routing
    - Path parameters (/users/:id)
    - Parameter validators shared by every route
    - Mounting under a prefix
    - Named routes and URL generation

    Usage:
        router = Router()
        router.get("/users/:id", show_user, name="user")
        router.param("id", load_user)

        matched = router.match("/users/123", "GET")
        router.url("user", 123)  # "/users/123"

        await router.dispatch(Context("GET", "/users/123"))
    """

    def __init__(self, config: Optional[RouterConfig] = None):
        self.config = (config or RouterConfig()).merge({})
        self._layers: List[Layer] = []
        self._params: Dict[str, List[Callable]] = {}
        self._lock = threading.RLock()

    @property
    def stack(self) -> List[Layer]:
        """Registered layers, in registration order."""
        return self._layers.copy()

    def register(
        self,
        path: Union[str, re.Pattern],
        methods: Sequence[str],
        middleware: Union[Callable, Sequence[Callable]],
        name: Optional[str] = None,
        **opts: Any,
    ) -> Layer:
        """Create a layer and add it to the route table.

        Args:
            path: URL pattern
            methods: HTTP methods
            middleware: Handler or list of handlers
            name: Route name
            opts: Layer options (sensitive, strict, end, ignore_captures)
        """
        options = LayerOptions.from_dict({
            **self.config.layer_options(),
            **opts,
            "name": name,
        })
        layer = Layer(path, methods, middleware, options)

        if self.config.prefix:
            layer.set_prefix(self.config.prefix)

        with self._lock:
            for param, fns in self._params.items():
                for fn in fns:
                    layer.param(param, fn)
            self._layers.append(layer)

        return layer

    def _verb(
        self,
        methods: Sequence[str],
        path: Union[str, re.Pattern],
        middleware: Sequence[Callable],
        name: Optional[str],
        opts: Dict[str, Any],
    ) -> "Router":
        self.register(path, methods, list(middleware), name=name, **opts)
        return self

    def get(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add GET route."""
        return self._verb(["GET"], path, middleware, name, opts)

    def post(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add POST route."""
        return self._verb(["POST"], path, middleware, name, opts)

    def put(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add PUT route."""
        return self._verb(["PUT"], path, middleware, name, opts)

    def patch(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add PATCH route."""
        return self._verb(["PATCH"], path, middleware, name, opts)

    def delete(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add DELETE route."""
        return self._verb(["DELETE"], path, middleware, name, opts)

    def head(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add HEAD route."""
        return self._verb(["HEAD"], path, middleware, name, opts)

    def options(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add OPTIONS route."""
        return self._verb(["OPTIONS"], path, middleware, name, opts)

    def all(self, path, *middleware: Callable, name: Optional[str] = None, **opts) -> "Router":
        """Add route for every configured method."""
        return self._verb(self.config.methods, path, middleware, name, opts)

    def param(self, param: str, fn: Callable[..., Any]) -> "Router":
        """Add a validator for a parameter on every route, present and future."""
        with self._lock:
            self._params.setdefault(param, []).append(fn)
            for layer in self._layers:
                layer.param(param, fn)
        return self

    def prefix(self, prefix: str) -> "Router":
        """Mount every route under prefix."""
        prefix = prefix[:-1] if prefix.endswith("/") else prefix

        with self._lock:
            self.config.prefix = prefix + self.config.prefix
            for layer in self._layers:
                layer.set_prefix(prefix)

        logger.info(f"Mounted {len(self._layers)} routes under {prefix}")
        return self

    def match(self, path: str, method: str = "GET") -> RouteMatch:
        """Find layers matching path and method.

        Returns every matching layer in registration order; the caller
        decides how to use them.
        """
        matched = RouteMatch()
        method = method.upper()

        with self._lock:
            for layer in self._layers:
                if not layer.match(path):
                    continue

                matched.path.append(layer)
                if not layer.methods or method in layer.methods:
                    matched.path_and_method.append(layer)
                    if layer.methods:
                        matched.route = True

        return matched

    def route(self, name: str) -> Optional[Layer]:
        """Get a layer by route name."""
        with self._lock:
            for layer in self._layers:
                if layer.name and layer.name == name:
                    return layer
        return None

    def url(self, name: str, *args: Any) -> str:
        """Generate a URL for a named route.

        Raises:
            RouteNotFoundError: if no route has that name
        """
        layer = self.route(name)
        if layer is None:
            raise RouteNotFoundError(f"No route found for name: {name}")
        return layer.url(*args)

    @staticmethod
    def _bind(layer: Layer) -> Middleware:
        """Middleware that exposes a layer's parameters on the context."""
        def bind_params(ctx: Context, next):
            ctx.captures = layer.captures(ctx.path)
            ctx.params = layer.params(ctx.path, ctx.captures, ctx.params)
            ctx.route_name = layer.name
            return next()

        return bind_params

    async def dispatch(self, ctx: Context, next: Optional[Callable[[], Any]] = None) -> Any:
        """Run the handler chains of every layer matching the request."""
        matched = self.match(ctx.path, ctx.method)
        ctx.matched = matched.path
        chain = MiddlewareChain()

        if not matched.route:
            logger.debug(f"No route for {ctx.method} {ctx.path}")
            return await chain(ctx, next)

        if self.config.log_requests:
            chain.add(LoggingMiddleware(LoggingConfig(skip_paths=self.config.log_skip_paths)))

        for layer in matched.path_and_method:
            chain.add(self._bind(layer))
            chain.extend(layer.stack)

        return await chain(ctx, next)

    def routes(self) -> Callable[..., Any]:
        """Router as a single ``(ctx, next)`` middleware."""
        return self.dispatch

    def __len__(self) -> int:
        return len(self._layers)


__all__ = [
    "Router",
    "RouteMatch",
]
