"""
Success response envelope.

Every 2xx JSON response is returned as::

    {"success": true, "data": <handler payload>, "count": <len> (lists only)}

Error responses already carry ``"success": false`` from the error handlers and
pass through untouched.
"""

import json
from typing import Any, Callable, Dict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.middleware.base import BaseHTTPMiddleware

# Key for skipping the envelope on specific routes
SKIP_INTERCEPTOR_KEY = "skip_interceptor"

EXCLUDED_PATHS = frozenset({"/openapi.json", "/docs", "/redoc"})


def wrap_payload(payload: Any) -> Dict[str, Any]:
    wrapped: Dict[str, Any] = {"success": True, "data": payload}
    if isinstance(payload, list):
        wrapped["count"] = len(payload)
    return wrapped


class SuccessResponseInterceptor(BaseHTTPMiddleware):
    """Wraps successful JSON responses unless the route opted out."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if request.url.path in EXCLUDED_PATHS:
            return response
        if not 200 <= response.status_code < 300:
            return response
        if getattr(request.state, SKIP_INTERCEPTOR_KEY, False):
            return response
        if "application/json" not in response.headers.get("content-type", ""):
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() != "content-length"
        }

        try:
            payload = json.loads(body.decode())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return Response(
                content=body, status_code=response.status_code, headers=headers
            )

        return JSONResponse(
            content=wrap_payload(payload),
            status_code=response.status_code,
            headers=headers,
        )


def skip_interceptor(func: Callable) -> Callable:
    """
    Decorator to return a route's payload without the success envelope.

    Usage:
        @router.get("/health")
        @skip_interceptor
        async def health():
            return {"status": "ok"}
    """
    setattr(func, SKIP_INTERCEPTOR_KEY, True)
    return func


class CustomAPIRoute(APIRoute):
    """Copies the skip_interceptor flag from the endpoint onto request.state."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()
        skip = getattr(self.endpoint, SKIP_INTERCEPTOR_KEY, False)

        async def custom_route_handler(request: Request) -> Response:
            if skip:
                setattr(request.state, SKIP_INTERCEPTOR_KEY, True)
            return await original_route_handler(request)

        return custom_route_handler
