"""RoadRoute - Route layers for HTTP routers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

RoadRoute provides the per-route building block of an HTTP router:
- Path patterns with named parameters (/users/:id)
- Parameter extraction with safe percent-decoding
- URL generation from parameters and query options
- Parameter validators ordered by their position in the path
- Mounting routes under a prefix

Architecture Overview:
┌─────────────────────────────────────────────────────────────────────────────┐
│                              RoadRoute                                       │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                              │
│  ┌─────────────────┐  ┌─────────────────┐  ┌─────────────────────────────┐ │
│  │    Pattern      │  │     Layer       │  │        Router               │ │
│  │                 │  │                 │  │                             │ │
│  │ - parse         │  │ - match         │  │ - register / verbs          │ │
│  │ - path_to_regexp│  │ - captures      │  │ - shared param validators   │ │
│  │ - builder       │  │ - params / url  │  │ - prefix / named URLs       │ │
│  │                 │  │ - param / prefix│  │ - dispatch                  │ │
│  └─────────────────┘  └─────────────────┘  └─────────────────────────────┘ │
│                                                                              │
└─────────────────────────────────────────────────────────────────────────────┘

Request Flow:
1. Router matches every layer whose pattern accepts the path
2. Layers allowing the method have their parameters bound to the context
3. Parameter validators run in path order, then the route handlers

Usage:
    from roadroute_core import Layer

    layer = Layer("/users/:id", ["get"], show_user)
    layer.methods                                   # ["HEAD", "GET"]
    layer.params("/users/42", layer.captures("/users/42"))  # {"id": "42"}
    layer.url({"id": 42})                           # "/users/42"
"""

__version__ = "0.1.0"
__author__ = "BlackRoad OS, Inc."

# Errors
from roadroute_core.errors import (
    BuildError,
    ConfigurationError,
    RouteNotFoundError,
    RoutingError,
)

# Routing
from roadroute_core.routing.context import Context
from roadroute_core.routing.layer import Layer, LayerOptions
from roadroute_core.routing.pattern import (
    Matcher,
    ParamDescriptor,
    compile_builder,
    parse,
    path_to_regexp,
)
from roadroute_core.routing.router import Router, RouteMatch

# Middleware
from roadroute_core.middleware.base import MiddlewareChain, ParamMiddleware, compose
from roadroute_core.middleware.logging import LoggingMiddleware

# Utils
from roadroute_core.utils.config import RouterConfig, load_config

__all__ = [
    # Version
    "__version__",
    # Errors
    "RoutingError",
    "ConfigurationError",
    "BuildError",
    "RouteNotFoundError",
    # Routing
    "Context",
    "Layer",
    "LayerOptions",
    "Matcher",
    "ParamDescriptor",
    "compile_builder",
    "parse",
    "path_to_regexp",
    "Router",
    "RouteMatch",
    # Middleware
    "MiddlewareChain",
    "ParamMiddleware",
    "compose",
    "LoggingMiddleware",
    # Utils
    "RouterConfig",
    "load_config",
]
