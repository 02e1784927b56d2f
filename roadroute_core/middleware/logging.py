"""Logging Middleware - Request logging.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class LoggingConfig:
    """Logging middleware configuration."""

    log_query: bool = True
    log_params: bool = True
    skip_paths: List[str] = field(default_factory=list)


class LoggingMiddleware:
    """Logging middleware for routed requests."""

    def __init__(self, config: Optional[LoggingConfig] = None):
        self.config = config or LoggingConfig()

    async def __call__(self, ctx: Any, next: Callable[[], Awaitable[Any]]) -> Any:
        if ctx.path in self.config.skip_paths:
            return await next()

        request_id = str(uuid.uuid4())[:8]
        ctx.state["request_id"] = request_id
        start_time = time.time()

        log_parts = [f"[{request_id}] --> {ctx.method} {ctx.path}"]
        if self.config.log_query and ctx.query:
            log_parts.append(f"query={ctx.query}")
        logger.info(" ".join(log_parts))

        try:
            return await next()
        finally:
            duration_ms = (time.time() - start_time) * 1000
            log_parts = [f"[{request_id}] <-- {ctx.status} ({duration_ms:.2f}ms)"]
            if self.config.log_params and ctx.params:
                log_parts.append(f"params={ctx.params}")
            logger.info(" ".join(log_parts))


__all__ = [
    "LoggingMiddleware",
    "LoggingConfig",
]
