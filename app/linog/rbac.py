from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, g, request

from app.linog.errors import AuthenticationError
from app.linog.security import token_service


def bearer_token() -> str | None:
    header = (request.headers.get("Authorization") or "").strip()
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Gate an endpoint on a valid bearer token.

    Identity comes only from the verified token; nothing in the request body
    is consulted.
    """

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise AuthenticationError.required()
        try:
            claims = token_service().verify(token)
        except AuthenticationError:
            current_app.logger.warning(
                "Rejected admin token path=%s request_id=%s", request.path, getattr(g, "request_id", None)
            )
            raise
        g.current_admin = claims
        g.current_admin_id = claims.sub
        return fn(*args, **kwargs)

    return wrapped
