"""Context - Per-request state passed through handler chains.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Context:
    """Request context.

    Handlers receive it as the first argument and may read route
    parameters from ``params`` or stash values in ``state``.
    """

    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    query: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    status: int = 404
    timestamp: float = field(default_factory=time.time)

    # Routing
    params: Dict[Any, Optional[str]] = field(default_factory=dict)
    captures: List[Optional[str]] = field(default_factory=list)
    matched: List[Any] = field(default_factory=list)
    route_name: Optional[str] = None
    state: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.method = self.method.upper()

    def get_header(self, name: str, default: str = "") -> str:
        """Get header value (case-insensitive)."""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return default


__all__ = [
    "Context",
]
