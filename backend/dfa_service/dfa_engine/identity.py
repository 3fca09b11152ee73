from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .errors import AuthenticationError


class UserIdentity(BaseModel):
    """Opaque account handle supplied by whatever signed the user in."""
    uid: str = Field(..., description="Opaque user identifier")
    email: Optional[str] = Field(default=None, description="Display address, stored as createdBy")

    @field_validator("uid")
    @classmethod
    def uid_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("User id cannot be empty")
        return v.strip()


def resolve_identity(uid: Optional[str], email: Optional[str] = None) -> UserIdentity:
    if uid is None or not uid.strip():
        raise AuthenticationError()
    email = email.strip() if email and email.strip() else None
    return UserIdentity(uid=uid, email=email)
