"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.

- DbSession: per-request database session
- Pagination: optional page/per_page query parameters
- RequireAdmin: admin API key check (header name from settings)
- ClientIP: caller address (review auditing)
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, Request, status
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.database import get_db
from catalog.services.security import verify_admin_key

settings = get_settings()

# Instead of `db: Session = Depends(get_db)` routes write `db: DbSession`
DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Pagination parameters for list endpoints.

    Both values are optional. FastAPI rejects non-integer input (422);
    missing or non-positive values are resolved to the configured defaults
    by the service layer, which also enforces the maximum page size.

        GET /books/?page=2&per_page=20
    """

    def __init__(
        self,
        page: int | None = Query(
            default=None,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        per_page: int | None = Query(
            default=None,
            description=f"Items per page (max {settings.max_page_size})",
            examples=[10, 25, 50],
        ),
    ) -> None:
        self.page = page
        self.per_page = per_page


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Admin Authentication
# =============================================================================
def require_admin(
    api_key: str | None = Header(None, alias=settings.api_key_header),
) -> None:
    """
    Reject requests without the admin API key.

    Skipped entirely when settings.api_key_enabled is False (development).

    Raises:
        HTTPException: 401 if the key is missing or wrong
    """
    if not settings.api_key_enabled:
        return None

    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"API key required. Provide {settings.api_key_header} header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not verify_admin_key(api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return None


RequireAdmin = Annotated[None, Depends(require_admin)]


def client_ip(request: Request) -> str:
    """Socket peer address (already rewritten by uvicorn for trusted proxies)."""
    return get_remote_address(request)


ClientIP = Annotated[str, Depends(client_ip)]
