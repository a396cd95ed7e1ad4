"""CLI entry points for database setup and one-off scheduled jobs."""
import asyncio
import logging
import sys

from household_networth.config import Settings
from household_networth.container import Container, init_container
from household_networth.db.sessions import init_db

logger = logging.getLogger(__name__)


def _container() -> Container:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    return init_container(settings)


def init(container: Container | None = None) -> None:
    """Create any missing tables in DATABASE_URL."""
    container = container or _container()
    init_db(container.engine())
    logger.info("Database schema is up to date")


def snapshot(container: Container | None = None) -> int:
    """Run one snapshot cycle without the HTTP server. Exits 1 if any unit failed."""
    container = container or _container()
    init_db(container.engine())

    async def run() -> int:
        try:
            result = await container.snapshots().run()
        finally:
            await container.price_cache().close()
        print(
            f"Created {result.created} snapshot(s) "
            f"({result.households} household(s), {result.users} user(s)) "
            f"in {result.duration_ms}ms"
        )
        for target, error in result.failed:
            print(f"Failed {target}: {error}", file=sys.stderr)
        return 1 if result.failed else 0

    return asyncio.run(run())


def create_snapshot() -> None:
    sys.exit(snapshot())
