"""Structured error payload schemas used by API responses."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class ErrorResponse(SQLModel):
    """Error envelope returned by every handler installed by error handling."""

    detail: str | dict[str, object] | list[object] = Field(
        description="Error message or a list of field-level validation issues.",
        examples=[
            "Complaint not found",
            [{"field": "hours_threshold", "message": "Time threshold is required"}],
        ],
    )
    request_id: str | None = Field(
        default=None,
        description="Request correlation identifier injected by middleware.",
    )
