"""Layer tests."""

import asyncio
import logging
import re

import pytest
from roadroute_core.errors import BuildError, ConfigurationError
from roadroute_core.middleware.base import compose
from roadroute_core.routing.context import Context
from roadroute_core.routing.layer import Layer, LayerOptions, normalize_methods


def handler(ctx, next):
    return next()


class TestConstruction:
    """Test layer construction."""

    def test_get_adds_head(self):
        """Test HEAD is added in front of GET."""
        assert Layer("/users/:id", ["get"], handler).methods == ["HEAD", "GET"]
        assert normalize_methods(["post", "get"]) == ["POST", "HEAD", "GET"]

    def test_head_not_duplicated(self):
        """Test HEAD is not added twice."""
        assert normalize_methods(["head", "get"]) == ["HEAD", "GET"]

    def test_head_moved_before_get(self):
        """Test a HEAD supplied after GET ends up right before it."""
        assert normalize_methods(["get", "head"]) == ["HEAD", "GET"]
        assert normalize_methods(["post", "get", "head"]) == ["POST", "HEAD", "GET"]

        methods = Layer("/", ["put", "head", "post", "get"], handler).methods
        assert methods.count("HEAD") == 1
        assert methods.index("HEAD") == methods.index("GET") - 1

    def test_no_head_without_get(self):
        """Test HEAD only follows GET."""
        assert normalize_methods(["post", "put"]) == ["POST", "PUT"]

    def test_single_and_list_middleware(self):
        """Test middleware may be a callable or a list."""
        assert Layer("/", ["GET"], handler).stack == [handler]
        assert Layer("/", ["GET"], [handler, handler]).stack == [handler, handler]

    def test_non_callable_middleware(self):
        """Test non-callable middleware is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            Layer("/users/:id", ["GET"], "nope")

        message = str(exc_info.value)
        assert "GET" in message
        assert "/users/:id" in message
        assert "str" in message

    def test_error_uses_route_name(self):
        """Test the error names the route when it has a name."""
        with pytest.raises(ConfigurationError, match="user.*int"):
            Layer("/users/:id", ["GET", "POST"], [handler, 42], {"name": "user"})

    def test_options_from_dict(self):
        """Test options mapping is converted, unknown keys ignored."""
        layer = Layer("/", ["GET"], handler, {"name": "home", "strict": True, "other": 1})
        assert isinstance(layer.opts, LayerOptions)
        assert layer.name == "home"
        assert layer.opts.strict is True

    def test_logs_definition(self, caplog):
        """Test route definition is logged."""
        caplog.set_level(logging.DEBUG, logger="roadroute_core.routing.layer")
        Layer("/users/:id", ["GET"], handler)
        assert "defined route ['HEAD', 'GET'] /users/:id" in caplog.text

    def test_param_names(self):
        """Test descriptors follow the pattern order."""
        layer = Layer("/:org/users/:id", ["GET"], handler)
        assert [p.name for p in layer.param_names] == ["org", "id"]
        assert layer.regexp.groups == len(layer.param_names)


class TestMatching:
    """Test matching and parameters."""

    def test_users_route(self):
        """Test matching, captures, params and url together."""
        layer = Layer("/users/:id", ["get"], handler)
        assert layer.methods == ["HEAD", "GET"]
        assert layer.match("/users/42")

        captures = layer.captures("/users/42")
        assert captures == ["42"]
        assert layer.params("/users/42", captures) == {"id": "42"}
        assert layer.url({"id": 42}) == "/users/42"

    def test_no_match(self):
        """Test non-matching path."""
        layer = Layer("/users/:id", ["GET"], handler)
        assert not layer.match("/teams/42")
        assert layer.captures("/teams/42") == []

    def test_params_are_decoded(self):
        """Test captured values are percent-decoded."""
        layer = Layer("/files/:name", ["GET"], handler)
        path = "/files/caf%C3%A9"
        assert layer.params(path, layer.captures(path)) == {"name": "café"}

    def test_malformed_escape_kept(self):
        """Test malformed escapes are returned raw."""
        layer = Layer("/files/:name", ["GET"], handler)
        path = "/files/%zz"
        assert layer.match(path)
        assert layer.params(path, layer.captures(path)) == {"name": "%zz"}

    def test_existing_params_preserved(self):
        """Test params merge into an existing mapping."""
        layer = Layer("/users/:id", ["GET"], handler)
        existing = {"org": "acme"}
        result = layer.params("/users/1", layer.captures("/users/1"), existing)
        assert result is existing
        assert result == {"org": "acme", "id": "1"}

    def test_missing_optional_param(self):
        """Test unmatched optional parameter."""
        layer = Layer("/users/:id?", ["GET"], handler)
        assert layer.params("/users", layer.captures("/users")) == {"id": None}

    def test_extra_captures_ignored(self):
        """Test capture positions without a descriptor are skipped."""
        layer = Layer("/users/:id", ["GET"], handler)
        assert layer.params("/users/1", ["1", "extra"]) == {"id": "1"}

    def test_ignore_captures(self):
        """Test ignore_captures option."""
        layer = Layer("/users/:id", ["GET"], handler, {"ignore_captures": True})
        assert layer.match("/users/1")
        assert layer.captures("/users/1") == []

    def test_idempotent(self):
        """Test repeated calls give the same result."""
        layer = Layer("/users/:id", ["GET"], handler)
        first = layer.params("/users/9", layer.captures("/users/9"))
        second = layer.params("/users/9", layer.captures("/users/9"))
        assert first == second == {"id": "9"}

    def test_round_trip(self):
        """Test generated URLs match and give back their params."""
        layer = Layer("/:a/posts/:b", ["GET"], handler)
        url = layer.url({"a": "1", "b": "2"})
        assert layer.match(url)
        assert layer.params(url, layer.captures(url)) == {"a": "1", "b": "2"}

    def test_round_trip_encoded(self):
        """Test values needing escapes survive the round trip."""
        layer = Layer("/search/:term", ["GET"], handler)
        url = layer.url({"term": "a b/ü"})
        assert url == "/search/a%20b%2F%C3%BC"
        assert layer.params(url, layer.captures(url)) == {"term": "a b/ü"}


class TestUrl:
    """Test URL generation."""

    def test_positional_args(self):
        """Test positional values bind in pattern order."""
        layer = Layer("/:a/:b", ["GET"], handler)
        assert layer.url(1, 2) == "/1/2"
        assert layer.url([1, 2]) == "/1/2"

    def test_positional_with_options(self):
        """Test trailing mapping holds options."""
        layer = Layer("/:a/:b", ["GET"], handler)
        assert layer.url(1, 2, {"query": {"x": "y"}}) == "/1/2?x=y"
        assert layer.url([1, 2], {"query": "x=y"}) == "/1/2?x=y"

    def test_mapping_with_query(self):
        """Test query appended to mapping-built URL."""
        layer = Layer("/users/:id", ["GET"], handler)
        assert layer.url({"id": 3}, {"query": {"page": 2}}) == "/users/3?page=2"
        assert layer.url({"id": 3}, {"query": {}}) == "/users/3"

    def test_mapping_without_tokens_is_options(self):
        """Test a mapping on a static route is read as options."""
        layer = Layer("/static", ["GET"], handler)
        assert layer.url({"query": {"a": 1}}) == "/static?a=1"

    def test_wildcard_stripped(self):
        """Test wildcard groups are removed before building."""
        layer = Layer("/files/(.*)", ["GET"], handler)
        assert layer.url() == "/files/"

    def test_missing_param(self):
        """Test missing parameter raises BuildError."""
        layer = Layer("/users/:id", ["GET"], handler)
        with pytest.raises(BuildError):
            layer.url({})
        with pytest.raises(BuildError):
            layer.url()

    def test_regex_route(self):
        """Test URLs cannot be built for regex routes."""
        layer = Layer(re.compile(r"^/item/(\d+)$"), ["GET"], handler)
        with pytest.raises(BuildError):
            layer.url(1)


class TestParam:
    """Test parameter validators."""

    def test_validators_ordered_by_pattern(self):
        """Test validators follow parameter order, not registration order."""
        layer = Layer("/:x/:y", ["GET"], handler)
        result = layer.param("y", lambda v, ctx, next: next()).param("x", lambda v, ctx, next: next())

        assert result is layer
        assert [getattr(fn, "param", None) for fn in layer.stack] == ["x", "y", None]

    def test_unknown_param_ignored(self):
        """Test validator for an absent parameter is dropped."""
        layer = Layer("/:x", ["GET"], handler)
        assert layer.param("nope", lambda v, ctx, next: next()) is layer
        assert layer.stack == [handler]

    def test_same_param_keeps_registration_order(self):
        """Test validators for one parameter stay in registration order."""
        first = lambda v, ctx, next: next()
        second = lambda v, ctx, next: next()
        layer = Layer("/:x", ["GET"], handler).param("x", first).param("x", second)

        assert [fn.fn for fn in layer.stack[:2]] == [first, second]
        assert layer.stack[2] is handler

    def test_untagged_order_preserved(self):
        """Test handlers keep their relative order behind validators."""
        other = lambda ctx, next: next()
        layer = Layer("/:x/:y", ["GET"], [handler, other])
        layer.param("y", lambda v, ctx, next: next())
        layer.param("x", lambda v, ctx, next: next())

        assert layer.stack[2:] == [handler, other]

    def test_appended_when_no_later_entry(self):
        """Test validator is appended to a chain of earlier validators."""
        layer = Layer("/:x/:y", ["GET"], [])
        layer.param("x", lambda v, ctx, next: next())
        layer.param("y", lambda v, ctx, next: next())

        assert [fn.param for fn in layer.stack] == ["x", "y"]

    def test_validators_run_first(self):
        """Test validators run in parameter order before handlers."""
        calls = []

        def record(value, ctx, next):
            calls.append(value)
            return next()

        def show(ctx, next):
            calls.append("handler")

        layer = Layer("/:x/:y", ["GET"], show)
        layer.param("y", record).param("x", record)

        ctx = Context("GET", "/1/2")
        layer.params(ctx.path, layer.captures(ctx.path), ctx.params)
        asyncio.run(compose(layer.stack)(ctx))

        assert calls == ["1", "2", "handler"]


class TestPrefix:
    """Test prefixing."""

    def test_set_prefix(self):
        """Test prefixed route matches only the prefixed path."""
        layer = Layer("/users/:id", ["GET"], handler)
        assert layer.set_prefix("/api") is layer

        assert layer.path == "/api/users/:id"
        assert layer.match("/api/users/7")
        assert not layer.match("/users/7")
        assert layer.params("/api/users/7", layer.captures("/api/users/7")) == {"id": "7"}
        assert layer.opts.prefix == "/api"

    def test_prefix_with_param(self):
        """Test parameters in the prefix are picked up."""
        layer = Layer("/users/:id", ["GET"], handler).set_prefix("/:org")
        assert [p.name for p in layer.param_names] == ["org", "id"]

        path = "/acme/users/7"
        assert layer.params(path, layer.captures(path)) == {"org": "acme", "id": "7"}
        assert layer.url("acme", 7) == "/acme/users/7"

    def test_prefix_param_ordering(self):
        """Test validator ranks use the prefixed parameters."""
        layer = Layer("/users/:id", ["GET"], handler)
        layer.param("id", lambda v, ctx, next: next())
        layer.set_prefix("/:org")
        layer.param("org", lambda v, ctx, next: next())

        assert [getattr(fn, "param", None) for fn in layer.stack] == ["org", "id", None]

    def test_empty_path_unchanged(self):
        """Test prefixing a layer without a path is a no-op."""
        layer = Layer("", ["GET"], handler)
        assert layer.set_prefix("/api") is layer
        assert layer.path == ""

    def test_regex_prefix(self):
        """Test prefixing a regex route."""
        layer = Layer(re.compile(r"^/item/(\d+)$"), ["GET"], handler).set_prefix("/v1")
        assert layer.match("/v1/item/3")
        assert not layer.match("/item/3")
        assert layer.captures("/v1/item/3") == ["3"]
