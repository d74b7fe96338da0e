"""Authentication schemas for token handling."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class TokenData(BaseModel):
    """Data extracted from a JWT token.

    Attributes:
        user_id: The user's UUID
        email: The user's email at the time the token was issued
        exp: Token expiration time
        type: Token type
        jti: Unique token identifier
    """

    user_id: UUID
    email: str
    exp: datetime
    type: str = "access"
    jti: str | None = None
