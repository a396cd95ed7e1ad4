"""Main module for the household net-worth service."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from household_networth.config import Settings
from household_networth.container import Container, init_container
from household_networth.core import install_exception_handlers
from household_networth.db import Storage, init_db, session_scope
from household_networth.routers import (accounts_router, assets_router,
                                        context_router, cron_router,
                                        dashboard_router, deposits_router,
                                        households_router,
                                        onboarding_router, pension_router,
                                        profiles_router, stocks_router)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create tables and the dev user at startup; close providers on shutdown."""
    container: Container = fastapi_app.state.container
    engine = container.engine()
    init_db(engine)

    resolver = container.identity_resolver()
    if resolver.dev_mode:
        with session_scope(engine) as session:
            user = resolver.ensure_dev_user(Storage(session))
        logger.warning("Authentication bypass enabled; all requests act as %s", user.email)

    yield

    # Close provider resources (e.g. httpx clients)
    for closeable in (container.price_cache(), resolver):
        try:
            await closeable.close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing %s: %s", type(closeable).__name__, exc)


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a DI container (a fresh one by default)."""
    fastapi_app = FastAPI(
        title="Household Net Worth",
        description="Household net-worth tracking: accounts, pensions, assets and snapshots",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.container = container or init_container()
    install_exception_handlers(fastapi_app)

    fastapi_app.include_router(context_router)
    fastapi_app.include_router(dashboard_router)
    fastapi_app.include_router(households_router)
    fastapi_app.include_router(profiles_router)
    fastapi_app.include_router(onboarding_router)
    fastapi_app.include_router(accounts_router)
    fastapi_app.include_router(pension_router)
    fastapi_app.include_router(deposits_router)
    fastapi_app.include_router(assets_router)
    fastapi_app.include_router(stocks_router)
    fastapi_app.include_router(cron_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def _configure_logging(settings: Settings) -> str:
    level = settings.log_level.upper()
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    return level.lower()


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    settings = Settings.from_env()
    level = _configure_logging(settings)
    uvicorn.run("household_networth.main:app", host="127.0.0.1", port=8001, log_level=level)


def run_dev():
    """Run the development server with auto-reload."""
    settings = Settings.from_env()
    level = _configure_logging(settings)
    uvicorn.run(
        "household_networth.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=level,
    )
