"""Schemas related to sessions, identities and profiles."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """Authenticated user as reported by the auth service."""

    id: str = Field(..., description="Opaque user identifier.")
    email: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Identity":
        return cls(id=str(payload["id"]), email=payload.get("email"), role=payload.get("role"))


class AuthTokens(BaseModel):
    """Token pair issued by the auth service."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


class Profile(BaseModel):
    """Row of the profiles table carrying authorization flags."""

    user_id: str
    is_admin: bool = False


class AuthEventType(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


class AuthEvent(BaseModel):
    """Identity change delivered to session subscribers."""

    type: AuthEventType
    identity: Optional[Identity] = None


class CredentialsPayload(BaseModel):
    """Email and password submitted to sign in or register."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class SessionResponse(BaseModel):
    """Returned after a successful sign-in or sign-up."""

    user: Identity
    access_token: Optional[str] = Field(
        None,
        description="Absent when the auth service requires email confirmation first.",
    )
    refresh_token: Optional[str] = None
    expires_in: Optional[Union[int, float]] = None


class CurrentUserResponse(BaseModel):
    """Identity of the caller with its display-level admin flag."""

    user: Optional[Identity] = None
    is_admin: bool = False


__all__ = [
    "AuthEvent",
    "AuthEventType",
    "AuthTokens",
    "CredentialsPayload",
    "CurrentUserResponse",
    "Identity",
    "Profile",
    "SessionResponse",
]
