"""Middleware exposing the request's tenant on ``request.state``.

The middleware never authorizes anything and never binds a session: the
tenant used for queries comes from the ``get_tenant_session`` dependency.
It only makes the organization available to cross-cutting concerns such as
request logging.
"""

from typing import Callable, Optional
from uuid import UUID

import jwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..auth.jwt import decode_token
from .context import resolve_tenant_id


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Attach ``org_id`` from the bearer token to ``request.state``.

    Missing or invalid tokens leave ``request.state.org_id`` as None; the
    dependency that opens the tenant session rejects them.

    Usage:
        app.add_middleware(TenantContextMiddleware)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.org_id = None

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return await call_next(request)

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return await call_next(request)

        try:
            payload = decode_token(parts[1])
        except jwt.InvalidTokenError:
            return await call_next(request)

        resolution = resolve_tenant_id(payload.get("org_id"))
        if resolution.ok:
            request.state.org_id = resolution.tenant_id

        return await call_next(request)


def get_org_id_from_request(request: Request) -> Optional[UUID]:
    """Return the org_id set by TenantContextMiddleware, or None."""
    return getattr(request.state, "org_id", None)
