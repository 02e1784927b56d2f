"""Utils module - Utility functions."""

from roadroute_core.utils.config import (
    RouterConfig,
    load_config,
)
from roadroute_core.utils.helpers import (
    append_query,
    encode_uri_component,
    safe_decode_uri_component,
)

__all__ = [
    "RouterConfig",
    "load_config",
    "append_query",
    "encode_uri_component",
    "safe_decode_uri_component",
]
