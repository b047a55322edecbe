# Standard library imports
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import cast
from uuid import UUID

# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from limits.storage import storage_from_string
from sqlalchemy import or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from decisiondeck.api import router as api_router
from decisiondeck.api.internal.utils.exceptions import register_exception_handlers
from decisiondeck.core.db import AsyncSessionLocal
from decisiondeck.core.monitoring import get_logger, setup_sentry
from decisiondeck.core.realtime import RoomManager
from decisiondeck.models.auth.user import User, UserRole
from decisiondeck.settings import settings
from decisiondeck.utils.password_utils import get_password_hash
from decisiondeck.utils.rate_limiter import AddressRateLimiter

# Set up the main application logger
logger = get_logger("decisiondeck")

if setup_sentry():
    logger.info(f"Sentry initialised in {settings.ENVIRONMENT} environment")


async def create_default_admin_user(session_factory: async_sessionmaker[AsyncSession]) -> UUID:
    async with session_factory() as db:
        result = await db.execute(
            select(User).where(or_(User.email == settings.ADMIN_EMAIL.lower(), User.username == settings.ADMIN_USERNAME))
        )
        existing_admin = result.scalars().first()

        if existing_admin is not None:
            logger.info("Admin user already exists.")
            return cast(UUID, existing_admin.id)

        admin_user = User(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            first_name=settings.ADMIN_FIRST_NAME,
            last_name=settings.ADMIN_LAST_NAME,
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN,
        )
        db.add(admin_user)
        await db.commit()
        logger.info("Admin user created.")
        return cast(UUID, admin_user.id)


def custom_generate_unique_id(route: APIRoute) -> str:
    # Handle routes without tags
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name or "unnamed_route"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting up DecisionDeck")

    try:
        admin_id = await create_default_admin_user(app.state.session_factory)
        logger.info(f"Admin user ready with ID: {admin_id}")
    except Exception as e:  # noqa: BLE001
        logger.error(f"Failed to create admin user: {e}")

    yield

    # Subscriber state is process-local and does not survive a restart
    app.state.room_manager.clear()
    logger.info("Shutting down DecisionDeck")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    docs_enabled = settings.ENVIRONMENT != "production"
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Real-time voting: one vote per voter per position, live tallies and analytics.",
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if docs_enabled else None,
        docs_url=f"{settings.API_V1_STR}/docs" if docs_enabled else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if docs_enabled else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    # Process-scoped state, one instance per application
    app.state.room_manager = RoomManager()
    app.state.session_factory = AsyncSessionLocal
    rate_limit_storage = storage_from_string(settings.RATE_LIMIT_STORAGE_URI)
    app.state.auth_rate_limiter = AddressRateLimiter(
        max_attempts=settings.AUTH_RATE_LIMIT_ATTEMPTS,
        window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
        scope="auth",
        storage=rate_limit_storage,
    )
    app.state.api_rate_limiter = AddressRateLimiter(
        max_attempts=settings.API_RATE_LIMIT_ATTEMPTS,
        window_seconds=settings.API_RATE_LIMIT_WINDOW_SECONDS,
        scope="api",
        storage=rate_limit_storage,
    )

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        database = "connected"
        try:
            async with app.state.session_factory() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:  # noqa: BLE001
            logger.error(f"Health check could not reach the database: {e}")
            database = "unavailable"
        return {
            "status": "healthy" if database == "connected" else "degraded",
            "version": "1.0.0",
            "database": database,
            "realtimeConnections": app.state.room_manager.connection_count,
        }

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


# Create the app instance
app = create_app()
