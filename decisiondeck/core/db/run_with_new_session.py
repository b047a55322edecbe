# Standard library imports
from collections.abc import Awaitable, Callable
from typing import Any

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from decisiondeck.core.db.get_async_session import AsyncSessionLocal


async def run_with_new_session(
    func: Callable[..., Awaitable[Any]],
    # Function receiving AsyncSession and returning an Awaitable
    *args: Any,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    **kwargs: Any,
) -> Any:
    """
    Run any function with a fresh new DB session.

    Args:
        func: The function to run, which must accept an
        AsyncSession as its first argument.
        *args: Positional arguments to pass to the function.
        session_factory: Where the session comes from; the configured
        database when omitted.
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        Any: The result of the function execution.
    """
    factory = session_factory or AsyncSessionLocal
    async with factory() as session:
        return await func(session, *args, **kwargs)
