"""Helper utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote, unquote, urlencode

# Characters left alone by encodeURIComponent / encodeURI
URI_COMPONENT_SAFE = "-_.!~*'()"
URI_SAFE = ";,/?:@&=+$-_.!~*'()#"

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_uri_component(value: Any) -> str:
    """Percent-encode a single path segment."""
    return quote(str(value), safe=URI_COMPONENT_SAFE)


def encode_uri(value: Any) -> str:
    """Percent-encode a value that may span several path segments."""
    return quote(str(value), safe=URI_SAFE)


def decode_uri_component(text: str) -> str:
    """Decode percent-escapes.

    Raises:
        ValueError: on a malformed escape or an invalid UTF-8 sequence
    """
    if _MALFORMED_ESCAPE.search(text):
        raise ValueError(f"Malformed URI sequence: {text!r}")
    return unquote(text, errors="strict")


def safe_decode_uri_component(text: str) -> str:
    """Decode percent-escapes, returning the raw text if decoding fails."""
    try:
        return decode_uri_component(text)
    except ValueError:
        return text


def build_query(query: Union[str, Mapping[str, Any]]) -> str:
    """Build a query string from a mapping or a preformatted string."""
    if isinstance(query, str):
        return query[1:] if query.startswith("?") else query

    return urlencode(
        {k: v for k, v in query.items() if v is not None},
        doseq=True,
    )


def append_query(
    path: str,
    query: Optional[Union[str, Mapping[str, Any]]] = None,
) -> str:
    """Append a query string to a path."""
    if not query:
        return path

    query_string = build_query(query)
    if not query_string:
        return path

    return f"{path}?{query_string}"


__all__ = [
    "encode_uri_component",
    "encode_uri",
    "decode_uri_component",
    "safe_decode_uri_component",
    "build_query",
    "append_query",
]
