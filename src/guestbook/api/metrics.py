from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from starlette.routing import Route

from guestbook.observability.metrics import GuestbookMetrics

router = APIRouter()

METRICS_PATH = "/metrics"
UNMATCHED_ENDPOINT = "unmatched"


@router.get(METRICS_PATH, include_in_schema=False)
async def metrics(request: Request) -> Response:
    registry: GuestbookMetrics = request.app.state.metrics
    return Response(content=registry.render(), media_type=registry.content_type)


def route_template(request: Request, root_path: str = "") -> str:
    """Full path template of the route that handled ``request``.

    Routers included with a prefix may be mounted, in which case the prefix
    is appended to ``root_path`` and the route only knows its own suffix.
    Requests that matched no route share one label.
    """
    route = request.scope.get("route")
    if not isinstance(route, Route):
        return UNMATCHED_ENDPOINT
    mount_prefix = request.scope.get("root_path", "")[len(root_path):]
    if mount_prefix and not route.path.startswith(mount_prefix + "/"):
        return mount_prefix + route.path
    return route.path


async def record_request_metrics(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """HTTP middleware counting requests and timing them per route template."""
    if request.url.path == METRICS_PATH:
        return await call_next(request)

    root_path = request.scope.get("root_path", "")
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        metrics: GuestbookMetrics | None = getattr(request.app.state, "metrics", None)
        if metrics is not None:
            metrics.observe_request(
                request.method,
                route_template(request, root_path),
                status_code,
                time.perf_counter() - start,
            )
