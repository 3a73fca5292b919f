# inmobiliaria/entrypoints/fastapi_app.py
from __future__ import annotations

from fastapi import FastAPI

from ..db import engine
from ..models import Base
from ..service_layer.cache import TtlCache
from .api.deps import Authenticator, StaticTokenAuthenticator
from .api.routers import duplicates, health, imports


def create_app(
    *,
    cache: TtlCache | None = None,
    authenticator: Authenticator | None = None,
    create_tables: bool = True,
) -> FastAPI:
    app = FastAPI(title="Inmobiliaria - Listing Import")

    # Process-wide collaborators live on app.state and reach routes via deps.
    app.state.cache = cache if cache is not None else TtlCache()
    app.state.authenticator = authenticator if authenticator is not None else StaticTokenAuthenticator.from_settings()

    if create_tables:
        @app.on_event("startup")
        async def _startup() -> None:
            # Single place where DB tables are created in dev.
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    # Routers
    app.include_router(health.router)
    app.include_router(imports.router)
    app.include_router(duplicates.router)

    return app
