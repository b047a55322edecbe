# Standard library imports
from typing import Any

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# Local application imports
from decisiondeck.settings import settings


def build_async_engine(url: str | None = None, **overrides: Any) -> AsyncEngine:
    """
    Build the async engine for ``url`` (defaults to the configured database).

    Pool sizing only applies to server databases; SQLite files are used
    for local development and tests and take the driver defaults.
    """
    url = url or settings.SQLALCHEMY_ASYNC_DATABASE_URI
    options: dict[str, Any] = {"echo": settings.DB_ECHO, "future": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    options.update(overrides)
    return create_async_engine(url, **options)


# Asynchronous Engine
async_engine = build_async_engine()
