from pydantic import BaseModel


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    username: str
    roles: list[str]
    email: str | None = None
    token_type: str = "Bearer"
    access_token: str
    expires_in: int
    refresh_token: str | None = None


# ── Token validation ─────────────────────────────────────────

class PrincipalOut(BaseModel):
    """Who a bearer token belongs to, as reported by GET /api/validate."""
    username: str
    roles: list[str]
    email: str | None = None
    static: bool = False

