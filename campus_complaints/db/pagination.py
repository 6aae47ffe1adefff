"""Typed wrapper around fastapi-pagination for SQLModel select statements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar, cast

from fastapi_pagination.ext.sqlalchemy import apaginate as _apaginate

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlalchemy.sql.selectable import Select
    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

    Transformer = Callable[[Sequence[Any]], Sequence[Any] | Awaitable[Sequence[Any]]]

T = TypeVar("T")


async def paginate(
    session: AsyncSession,
    statement: Select[Any] | SelectOfScalar[Any],
    *,
    transformer: Transformer | None = None,
) -> LimitOffsetPage[T]:
    """Execute a paginated query using the limit/offset params of the current request."""
    return cast(
        "LimitOffsetPage[T]",
        await _apaginate(session, statement, transformer=transformer),
    )
