"""Routing module - Route layers, pattern compilation and the router."""

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

__all__ = [
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
]
