"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_principal  → accept a static token or a JWT access token
  require_role(...)      → restrict to callers holding ALL listed roles
"""

import secrets
from dataclasses import dataclass, field

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth.jwt import decode_token
from depotlifecycle.auth.roles import ALL_ROLES
from depotlifecycle.config import settings
from depotlifecycle.database import get_db
from depotlifecycle.models.user import ApiUser

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    """The caller behind a bearer token."""
    username: str
    roles: list[str] = field(default_factory=list)
    email: str | None = None
    static: bool = False


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _match_static_token(token: str) -> bool:
    return any(
        secrets.compare_digest(token, candidate)
        for candidate in settings.static_token_list
    )


# ── Core principal dependency ───────────────────────────────

async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve the bearer token to a principal.

    Static tokens carry every role. A JWT must be an access token for an
    active user; its roles come from the token claims.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Missing bearer token")
    token = credentials.credentials

    if _match_static_token(token):
        return Principal(username="static", roles=list(ALL_ROLES), static=True)

    payload = decode_token(token)
    username: str | None = payload.get("sub")
    if not username or payload.get("type") != "access":
        raise _unauthorized("Invalid or expired token")

    result = await db.execute(select(ApiUser).where(ApiUser.username == username))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise _unauthorized("User not found or inactive")

    return Principal(
        username=user.username,
        roles=list(payload.get("roles", [])),
        email=payload.get("email"),
    )


# ── Role-based access control ───────────────────────────────

def require_role(*roles: str):
    """Dependency factory: restrict to callers who hold ALL listed roles.

    Usage:
        @router.post("/gate")
        async def create(principal: Principal = Depends(require_role(GATE_CREATE))):
            ...
    """
    async def _check(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        missing = [r for r in roles if r not in principal.roles]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing roles: {', '.join(missing)}",
            )
        return principal

    return _check
