"""Auth schemas."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


class CurrentUser(BaseModel):
    """Verified token subject, handed to protected handlers."""
    username: str
    expires_at: int
