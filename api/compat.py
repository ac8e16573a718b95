"""
api/compat.py -- Legacy /api/colleges routing shim.

Colleges and tours are the same entity; only the tours tables and routes
exist. Older clients still call /api/colleges/..., so this ASGI middleware
rewrites those paths to /api/tours/... before routing. It is a plain path
rewrite, not a redirect: the client sees the tours response directly.
"""

import logging

from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("collegetours.api")

LEGACY_PREFIX = "/api/colleges"
CURRENT_PREFIX = "/api/tours"


def rewrite_legacy_path(path: str) -> str:
    """Map /api/colleges[/...] onto /api/tours[/...]; leave other paths alone."""
    if path == LEGACY_PREFIX or path.startswith(LEGACY_PREFIX + "/"):
        return CURRENT_PREFIX + path[len(LEGACY_PREFIX):]
    return path


class LegacyCollegesMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            path = scope["path"]
            new_path = rewrite_legacy_path(path)
            if new_path != path:
                logger.debug("Rewriting %s to %s", path, new_path)
                scope = dict(scope, path=new_path, raw_path=new_path.encode("utf-8"))
        await self.app(scope, receive, send)
