# inmobiliaria/entrypoints/api/deps.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from fastapi import Depends, Header, HTTPException, Request

from ...config import settings
from ...service_layer.cache import TtlCache


@dataclass(frozen=True)
class Caller:
    subject: str
    is_admin: bool = True


class Authenticator(Protocol):
    def verify(self, token: str) -> Caller | None: ...


@dataclass
class StaticTokenAuthenticator:
    """Bearer tokens issued elsewhere and handed to us through ADMIN_TOKENS."""

    tokens: frozenset[str]

    @classmethod
    def from_settings(cls) -> "StaticTokenAuthenticator":
        return cls(tokens=frozenset(settings.admin_tokens()))

    def verify(self, token: str) -> Caller | None:
        if token and token in self.tokens:
            return Caller(subject=f"token:{token[:4]}")
        return None


def get_authenticator(request: Request) -> Authenticator:
    auth = getattr(request.app.state, "authenticator", None)
    if auth is None:
        auth = StaticTokenAuthenticator.from_settings()
    return auth


def require_admin(
    authorization: str | None = Header(default=None),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Caller:
    if isinstance(authenticator, StaticTokenAuthenticator) and not authenticator.tokens:
        # nothing configured: open in dev/test, closed everywhere else
        if settings.ENV.lower() in ("dev", "local", "test"):
            return Caller(subject="anonymous")
        raise HTTPException(status_code=401, detail="Admin authentication is not configured")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    caller = authenticator.verify(token.strip())
    if caller is None or not caller.is_admin:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


def get_cache(request: Request) -> TtlCache:
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        cache = TtlCache()
        request.app.state.cache = cache
    return cache
