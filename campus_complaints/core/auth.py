"""Service-credential authentication for privileged API callers.

Every `/api/v1` route performs writes across all complaints (or reads data
that is only meant for staff tooling), so callers must present the shared
service token as `Authorization: Bearer <token>`. Schedulers, the CLI, and
admin tooling all use the same credential.
"""

from __future__ import annotations

from dataclasses import dataclass
from hmac import compare_digest
from typing import Literal

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campus_complaints.core.config import settings
from campus_complaints.core.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)


@dataclass(frozen=True)
class ServiceAuthContext:
    """Authenticated principal for service-token requests."""

    actor_type: Literal["service"] = "service"


def verify_service_token(token: str | None) -> bool:
    """Return whether a presented token matches the configured service token."""
    expected = settings.service_api_token.strip()
    if not token or not expected:
        return False
    return compare_digest(token, expected)


async def require_service_auth(
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
) -> ServiceAuthContext:
    """Require a valid service bearer token."""
    token = credentials.credentials.strip() if credentials is not None else None
    if not verify_service_token(token):
        logger.warning("auth.service_token.rejected", extra={"token_present": bool(token)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing service token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ServiceAuthContext()
