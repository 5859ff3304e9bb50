"""
Signed, time-limited admin session tokens.

Tokens are stateless: the server keeps no session or revocation list, so
logout is the client discarding its token and a leaked token stays valid
until it expires.
"""
from __future__ import annotations

import hashlib
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from flask import Flask, current_app
from itsdangerous import BadData, URLSafeSerializer

from app.linog.errors import AuthenticationError
from app.linog.models import Admin

TOKEN_SALT = "admin-token"


@dataclass(frozen=True)
class TokenClaims:
    sub: int
    username: str
    iat: int
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)

    def as_dict(self) -> dict:
        return {"sub": self.sub, "username": self.username, "iat": self.iat, "exp": self.exp}


@dataclass(frozen=True)
class IssuedToken:
    token: str
    claims: TokenClaims


class TokenService:
    def __init__(
        self,
        secret_key: str,
        *,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], float] = time.time,
    ):
        if not secret_key:
            raise ValueError("secret_key is required to sign admin tokens")
        self.ttl = ttl
        self.clock = clock
        self._serializer = URLSafeSerializer(
            secret_key,
            salt=TOKEN_SALT,
            signer_kwargs={"digest_method": hashlib.sha256},
        )

    def issue(self, admin: Admin) -> IssuedToken:
        now = int(self.clock())
        claims = TokenClaims(
            sub=admin.id,
            username=admin.username,
            iat=now,
            exp=now + int(self.ttl.total_seconds()),
        )
        return IssuedToken(token=self._serializer.dumps(claims.as_dict()), claims=claims)

    def verify(self, token: str) -> TokenClaims:
        """Return the token's claims, or raise AuthenticationError. Never trusts a partial payload."""
        try:
            payload = self._serializer.loads(token)
        except BadData:
            raise AuthenticationError()
        try:
            claims = TokenClaims(
                sub=int(payload["sub"]),
                username=str(payload["username"]),
                iat=int(payload["iat"]),
                exp=int(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError()
        if self.clock() >= claims.exp:
            raise AuthenticationError()
        return claims


def init_tokens(app: Flask) -> None:
    app.extensions["token_service"] = TokenService(
        app.config["SECRET_KEY"],
        ttl=timedelta(hours=int(app.config.get("TOKEN_TTL_HOURS", 24))),
    )


def token_service(app: Flask | None = None) -> TokenService:
    app = app or current_app
    return app.extensions["token_service"]
