# Standard library imports
import math

# Third-party imports
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


async def count_rows(db: AsyncSession, query: Select) -> int:
    """Count the rows a select would return, ignoring its ordering."""
    result = await db.execute(select(func.count()).select_from(query.order_by(None).subquery()))
    return int(result.scalar_one())


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size
