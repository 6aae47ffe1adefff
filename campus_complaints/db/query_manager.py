"""Chainable query helpers exposed on models as `Model.objects`."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlmodel import col, select

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlmodel.ext.asyncio.session import AsyncSession
    from sqlmodel.sql.expression import SelectOfScalar

ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class ModelQuery(Generic[ModelT]):
    """Immutable query builder; every refinement returns a new instance."""

    model: type[ModelT]
    clauses: tuple[Any, ...] = ()
    ordering: tuple[Any, ...] = ()
    offset_value: int | None = None
    limit_value: int | None = None

    def filter(self, *clauses: Any) -> ModelQuery[ModelT]:
        return replace(self, clauses=(*self.clauses, *clauses))

    def filter_by(self, **values: Any) -> ModelQuery[ModelT]:
        clauses = tuple(col(getattr(self.model, key)) == value for key, value in values.items())
        return self.filter(*clauses)

    def order_by(self, *ordering: Any) -> ModelQuery[ModelT]:
        return replace(self, ordering=(*self.ordering, *ordering))

    def offset(self, value: int) -> ModelQuery[ModelT]:
        return replace(self, offset_value=max(0, value))

    def limit(self, value: int) -> ModelQuery[ModelT]:
        return replace(self, limit_value=max(0, value))

    @property
    def statement(self) -> SelectOfScalar[ModelT]:
        stmt = select(self.model)
        if self.clauses:
            stmt = stmt.where(*self.clauses)
        if self.ordering:
            stmt = stmt.order_by(*self.ordering)
        if self.offset_value is not None:
            stmt = stmt.offset(self.offset_value)
        if self.limit_value is not None:
            stmt = stmt.limit(self.limit_value)
        return stmt

    async def all(self, session: AsyncSession) -> list[ModelT]:
        return list(await session.exec(self.statement))

    async def first(self, session: AsyncSession) -> ModelT | None:
        return (await session.exec(self.statement)).first()


class ModelManager(Generic[ModelT]):
    """Entry point for `Model.objects` queries."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def all(self) -> ModelQuery[ModelT]:
        return ModelQuery(self.model)

    def by_id(self, obj_id: Any) -> ModelQuery[ModelT]:
        return self.filter_by(id=obj_id)

    def by_ids(self, obj_ids: Iterable[Any]) -> ModelQuery[ModelT]:
        return self.filter(col(getattr(self.model, "id")).in_(list(obj_ids)))

    def filter(self, *clauses: Any) -> ModelQuery[ModelT]:
        return ModelQuery(self.model).filter(*clauses)

    def filter_by(self, **values: Any) -> ModelQuery[ModelT]:
        return ModelQuery(self.model).filter_by(**values)


class ManagerDescriptor:
    """Descriptor that binds a `ModelManager` to the owning model class."""

    def __get__(self, instance: object, owner: type[ModelT]) -> ModelManager[ModelT]:
        return ModelManager(owner)
