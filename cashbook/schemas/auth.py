"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from cashbook.models.user import RoleName


class CurrentUser(BaseModel):
    """Resolved identity (id, email, name, role) attached to authorized requests."""

    id: str
    email: str
    name: str
    role: RoleName

    class Config:
        from_attributes = True


class CredentialsSignInRequest(BaseModel):
    """Email and password for the credentials sign-in (test account only)."""

    email: str = Field(..., min_length=3, max_length=320, description="Email")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class SessionInfo(BaseModel):
    """Public part of a session row; the token is never echoed back."""

    id: str
    expiresAt: datetime


class SessionStatusResponse(BaseModel):
    """Response for GET /auth/check-session."""

    authenticated: bool
    user: CurrentUser | None = None
    session: SessionInfo | None = None
    message: str | None = None


class SignInResponse(BaseModel):
    """Response for a successful credentials sign-in."""

    success: bool = True
    user: CurrentUser
    session: SessionInfo


class TestUserResponse(BaseModel):
    """Response for POST /auth/test-user."""

    success: bool = True
    message: str
    user: CurrentUser
