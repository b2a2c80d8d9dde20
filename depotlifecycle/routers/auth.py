"""Auth routes: login, token refresh, token validation.

Route overview:
  POST /api/login            username + password → access + refresh token
  POST /oauth/access_token   grant_type=refresh_token → new access token
  GET  /api/validate         report who the bearer token belongs to
"""

from fastapi import APIRouter, Depends, Form, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth.deps import Principal, get_current_principal
from depotlifecycle.auth.jwt import create_access_token, create_refresh_token, decode_token
from depotlifecycle.auth.password import verify_password
from depotlifecycle.config import settings
from depotlifecycle.database import get_db
from depotlifecycle.models.user import ApiUser
from depotlifecycle.schemas.auth import LoginRequest, PrincipalOut, TokenResponse

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def _build_token_response(user: ApiUser) -> TokenResponse:
    roles = list(user.roles or [])
    return TokenResponse(
        username=user.username,
        roles=roles,
        email=user.email,
        access_token=create_access_token(user.username, roles, user.email),
        expires_in=settings.access_token_expire_minutes * 60,
        refresh_token=create_refresh_token(user.username),
    )


async def _get_active_user(db: AsyncSession, username: str) -> ApiUser | None:
    result = await db.execute(select(ApiUser).where(ApiUser.username == username))
    user = result.scalar_one_or_none()
    if user and user.is_active:
        return user
    return None


# ── POST /api/login ─────────────────────────────────────────

@router.post("/api/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Username + password login. Returns a JWT with the user's roles."""
    user = await _get_active_user(db, body.username)
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _build_token_response(user)


# ── POST /oauth/access_token ────────────────────────────────

@router.post("/oauth/access_token", response_model=TokenResponse)
async def refresh_access_token(
    grant_type: str = Form(...),
    refresh_token: str = Form(...),
    db: AsyncSession = Depends(get_db),
):
    """Exchange a refresh token for a new access token (and refresh token)."""
    if grant_type != "refresh_token":
        raise HTTPException(status_code=400, detail=f"Unsupported grant_type: {grant_type}")

    payload = decode_token(refresh_token)
    username = payload.get("sub")
    if not username or payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user = await _get_active_user(db, username)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return _build_token_response(user)


# ── GET /api/validate ───────────────────────────────────────

@router.get("/api/validate", response_model=PrincipalOut)
async def validate(principal: Principal = Depends(get_current_principal)):
    return PrincipalOut(
        username=principal.username,
        roles=principal.roles,
        email=principal.email,
        static=principal.static,
    )
