"""
User Domain Model

Login account stored in the credentials table. The API role is derived
from the legacy user_type code and the supervisor flag.

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime, timezone


class User(BaseModel):
    id: int = Field(..., description="User ID")
    username: Optional[str] = None
    email: str = Field(..., description="Login email")
    full_name: Optional[str] = None
    password_hash: Optional[str] = Field(None, exclude=True)
    user_type: Optional[int] = Field(None, description="Legacy type code (1 fitter, 2 admin, 3 factory, 4 custom saddler)")
    is_supervisor: bool = False
    fitter_id: Optional[int] = None
    factory_id: Optional[int] = None
    failed_login_attempts: int = 0
    locked_until: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    role: str = "user"

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.email

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        if self.locked_until is None:
            return False
        now = now or datetime.now(timezone.utc)
        locked_until = self.locked_until
        if locked_until.tzinfo is None:
            locked_until = locked_until.replace(tzinfo=timezone.utc)
        return locked_until > now

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['display_name'] = self.display_name
        return data


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: dict
