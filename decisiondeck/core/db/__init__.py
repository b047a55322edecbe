# Local application imports
from decisiondeck.core.db.create_async_engine import async_engine, build_async_engine
from decisiondeck.core.db.get_async_session import AsyncSessionLocal, get_async_session
from decisiondeck.core.db.run_with_new_session import run_with_new_session

__all__ = [
    "AsyncSessionLocal",
    "async_engine",
    "build_async_engine",
    "get_async_session",
    "run_with_new_session",
]
