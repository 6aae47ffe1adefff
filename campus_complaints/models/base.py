"""Base model class with the chainable `objects` query manager."""

from __future__ import annotations

from typing import ClassVar

from sqlmodel import SQLModel

from campus_complaints.db.query_manager import ManagerDescriptor


class QueryModel(SQLModel, table=False):
    """SQLModel base exposing `Model.objects` query helpers."""

    objects: ClassVar[ManagerDescriptor] = ManagerDescriptor()
