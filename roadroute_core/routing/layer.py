"""Layer - A single route: pattern, methods and handler chain.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from roadroute_core.errors import BuildError, ConfigurationError
from roadroute_core.middleware.base import ParamMiddleware
from roadroute_core.routing.pattern import (
    Matcher,
    ParamDescriptor,
    Token,
    param_names,
    parse,
    path_to_regexp,
    tokens_to_function,
)
from roadroute_core.utils.helpers import append_query, safe_decode_uri_component

logger = logging.getLogger(__name__)

_WILDCARD_MARKER = re.compile(r"\(\.\*\)")


@dataclass
class LayerOptions:
    """Layer options."""

    name: Optional[str] = None
    sensitive: bool = False
    strict: bool = False
    end: bool = True
    ignore_captures: bool = False
    prefix: str = ""
    delimiter: str = "/"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayerOptions":
        """Create options from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    def pattern_options(self) -> Dict[str, Any]:
        """Options understood by the pattern compiler."""
        return {
            "sensitive": self.sensitive,
            "strict": self.strict,
            "end": self.end,
            "delimiter": self.delimiter,
        }


@dataclass(frozen=True)
class CompiledPattern:
    """A path together with the matcher compiled from it."""

    path: Union[str, re.Pattern]
    matcher: Matcher

    @classmethod
    def compile(
        cls,
        path: Union[str, re.Pattern],
        options: LayerOptions,
    ) -> "CompiledPattern":
        return cls(path=path, matcher=path_to_regexp(path, options=options.pattern_options()))


@dataclass(frozen=True)
class UrlRequest:
    """Normalized arguments of Layer.url()."""

    bindings: Dict[Any, Any]
    query_options: Optional[Mapping[str, Any]] = None


def normalize_methods(methods: Sequence[str]) -> List[str]:
    """Uppercase methods; GET routes also answer HEAD."""
    normalized = [method.upper() for method in methods]
    if "GET" not in normalized:
        return normalized

    # One HEAD, immediately before the first GET
    normalized = [method for method in normalized if method != "HEAD"]
    normalized.insert(normalized.index("GET"), "HEAD")
    return normalized


class Layer:
    """Route layer.

    Features:
    - Pattern matching with named parameters
    - Parameter extraction with percent-decoding
    - URL generation from parameters
    - Parameter validators ordered by their position in the pattern
    - Prefixing when mounted under a parent path

    Usage:
        layer = Layer("/users/:id", ["GET"], show_user)

        if layer.match("/users/42"):
            params = layer.params("/users/42", layer.captures("/users/42"))

        layer.url({"id": 42})  # "/users/42"
    """

    def __init__(
        self,
        path: Union[str, re.Pattern],
        methods: Sequence[str],
        middleware: Union[Callable, Sequence[Callable]],
        opts: Optional[Union[LayerOptions, Mapping[str, Any]]] = None,
    ):
        if opts is None:
            opts = LayerOptions()
        elif not isinstance(opts, LayerOptions):
            opts = LayerOptions.from_dict(opts)

        self.opts = opts
        self.name = opts.name or None
        self.methods = normalize_methods(methods)

        if isinstance(middleware, (list, tuple)):
            stack = list(middleware)
        else:
            stack = [middleware]

        for fn in stack:
            if not callable(fn):
                raise ConfigurationError(
                    f"{','.join(methods)} `{opts.name or path}`: `middleware` "
                    f"must be callable, not `{type(fn).__name__}`"
                )

        self.stack: List[Callable] = stack
        self._compiled = CompiledPattern.compile(path, opts)

        logger.debug(f"defined route {self.methods} {opts.prefix}{self.path}")

    @property
    def path(self) -> Union[str, re.Pattern]:
        return self._compiled.path

    @property
    def regexp(self) -> Matcher:
        return self._compiled.matcher

    @property
    def param_names(self) -> List[ParamDescriptor]:
        return list(self._compiled.matcher.keys)

    def match(self, path: str) -> bool:
        """Check if path matches this route."""
        return self.regexp.test(path)

    def captures(self, path: str) -> List[Optional[str]]:
        """Raw capture groups for path, in pattern order."""
        if self.opts.ignore_captures:
            return []
        return self.regexp.exec(path) or []

    def params(
        self,
        path: str,
        captures: Sequence[Optional[str]],
        existing_params: Optional[Dict[Any, Any]] = None,
    ) -> Dict[Any, Any]:
        """Map captures onto parameter names.

        Args:
            path: Request path
            captures: Output of captures()
            existing_params: Mapping to merge into (returned as is)

        Returns:
            Dict of decoded parameter values
        """
        params = existing_params if existing_params is not None else {}
        keys = self._compiled.matcher.keys

        for i, capture in enumerate(captures):
            if i < len(keys):
                params[keys[i].name] = safe_decode_uri_component(capture) if capture else capture

        return params

    def url(self, *args: Any) -> str:
        """Generate a URL for this route.

        Accepts a mapping of parameters, a list of positional values, or
        the values themselves; a trailing mapping holds options such as
        ``query``.

        Usage:
            layer = Layer("/users/:id", ["GET"], show_user)

            layer.url({"id": 123})                           # "/users/123"
            layer.url(123)                                   # "/users/123"
            layer.url({"id": 123}, {"query": {"page": 2}})   # "/users/123?page=2"

        Raises:
            BuildError: if a required parameter is missing or invalid
        """
        if isinstance(self.path, re.Pattern):
            raise BuildError(f"Cannot build a URL for pattern {self.path.pattern!r}")

        path = _WILDCARD_MARKER.sub("", self.path)
        tokens = parse(path, self.opts.delimiter)
        request = self._classify_url_args(args, tokens)
        built = tokens_to_function(tokens)(request.bindings)

        if request.query_options and request.query_options.get("query"):
            return append_query(built, request.query_options["query"])

        return built

    @staticmethod
    def _classify_url_args(args: Sequence[Any], tokens: List[Token]) -> UrlRequest:
        names = param_names(tokens)

        if not args:
            return UrlRequest(bindings={})

        first, rest = args[0], args[1:]
        trailing = rest[0] if rest and isinstance(rest[0], Mapping) else None

        if isinstance(first, Mapping):
            if names:
                return UrlRequest(bindings=dict(first), query_options=trailing)
            # Nothing to bind; the mapping holds options
            return UrlRequest(bindings={}, query_options=trailing if trailing is not None else first)

        if isinstance(first, (list, tuple)):
            values = list(first)
            options = trailing
        else:
            values = list(args)
            options = None
            if values and isinstance(values[-1], Mapping):
                options = values.pop()

        bindings = {
            name: values[i] if i < len(values) else None
            for i, name in enumerate(names)
        }
        return UrlRequest(bindings=bindings, query_options=options)

    def param(self, param: str, fn: Callable[..., Any]) -> "Layer":
        """Register a validator for a route parameter.

        The validator is called as ``fn(value, ctx, next)`` before the
        route handlers. Validators run in the order their parameters
        appear in the path, whatever order they were registered in.

        Usage:
            layer.param("user", load_user).param("id", check_id)
        """
        names = [key.name for key in self._compiled.matcher.keys]
        if param not in names:
            return self

        rank = names.index(param)
        middleware = ParamMiddleware(param, fn)

        def rank_of(entry: Callable) -> float:
            tag = getattr(entry, "param", None)
            if tag is None:
                return math.inf
            return names.index(tag) if tag in names else -1

        position = next(
            (i for i, entry in enumerate(self.stack) if rank_of(entry) > rank),
            len(self.stack),
        )
        self.stack.insert(position, middleware)

        logger.debug(f"param validator {param!r} at position {position} of {self.path}")
        return self

    def set_prefix(self, prefix: str) -> "Layer":
        """Prefix the route path, recompiling matcher and parameters."""
        if not self.path:
            return self

        if isinstance(self.path, re.Pattern):
            source = self.path.pattern
            if source.startswith("^"):
                source = source[1:]
            path = re.compile(f"^{re.escape(prefix)}{source}", self.path.flags)
        else:
            path = prefix + self.path

        self.opts = replace(self.opts, prefix=prefix + self.opts.prefix)
        self._compiled = CompiledPattern.compile(path, self.opts)

        logger.debug(f"prefixed route {self.methods} {path}")
        return self

    def __repr__(self) -> str:
        return f"Layer(path={self.path!r}, methods={self.methods!r}, name={self.name!r})"


__all__ = [
    "Layer",
    "LayerOptions",
    "CompiledPattern",
    "UrlRequest",
    "normalize_methods",
]
