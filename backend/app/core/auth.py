"""
Authentication and authorization for the Saddle Order API

Issues and validates HS256 JWT access tokens and provides the role guards
used by every router.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from app.core.config import settings


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


# Known roles. A supervisor is an admin with extra oversight, so any
# guard that admits "admin" admits "supervisor" too.
ROLE_USER = "user"
ROLE_FITTER = "fitter"
ROLE_FACTORY = "factory"
ROLE_CUSTOMSADDLER = "customsaddler"
ROLE_ADMIN = "admin"
ROLE_SUPERVISOR = "supervisor"

ROLES = (ROLE_USER, ROLE_FITTER, ROLE_FACTORY, ROLE_CUSTOMSADDLER, ROLE_ADMIN, ROLE_SUPERVISOR)
STAFF_ROLES = (ROLE_ADMIN, ROLE_SUPERVISOR)


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: int
    email: str
    name: Optional[str] = None
    role: str = ROLE_USER
    fitter_id: Optional[int] = None
    factory_id: Optional[int] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_auth_secret() -> str:
        """Get the AUTH_SECRET from settings"""
        secret = settings.AUTH_SECRET
        if not secret:
            raise ValueError("AUTH_SECRET environment variable is not set")
        return secret

    @staticmethod
    def get_jwt_algorithm() -> str:
        return settings.JWT_ALGORITHM


def create_access_token(
    user_id: int,
    email: str,
    role: str,
    name: Optional[str] = None,
    fitter_id: Optional[int] = None,
    factory_id: Optional[int] = None,
    expires_minutes: Optional[int] = None
) -> str:
    """
    Issue a signed access token.

    Payload:
    {
        "sub": "42",
        "id": 42,
        "email": "jane@example.com",
        "name": "Jane",
        "role": "fitter",
        "fitter_id": 7,
        "factory_id": null,
        "iat": 1234567890,
        "exp": 1234571490
    }
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "email": email,
        "name": name,
        "role": role,
        "fitter_id": fitter_id,
        "factory_id": factory_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=lifetime)).timestamp()),
    }
    return jwt.encode(payload, AuthConfig.get_auth_secret(), algorithm=AuthConfig.get_jwt_algorithm())


def decode_access_token(token: str) -> dict:
    """
    Decode and validate an access token.

    Raises 401 when the token is expired or cannot be verified.
    """
    try:
        return jwt.decode(
            token,
            AuthConfig.get_auth_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except JWTError as e:
        error_msg = str(e).lower()
        if "expired" in error_msg:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


def _user_from_payload(payload: Dict[str, Any]) -> Optional[TokenUser]:
    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        return None

    role = payload.get("role", ROLE_USER)
    if role not in ROLES:
        role = ROLE_USER

    return TokenUser(
        id=int(user_id),
        email=email,
        name=payload.get("name"),
        role=role,
        fitter_id=payload.get("fitter_id"),
        factory_id=payload.get("factory_id")
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.email}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_access_token(credentials.credentials)
    user = _user_from_payload(payload)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id or email",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenUser]:
    """
    Optional authentication - returns None if no valid token provided.
    """
    if not credentials:
        return None

    try:
        return _user_from_payload(decode_access_token(credentials.credentials))
    except HTTPException:
        return None


def has_any_role(user: TokenUser, roles) -> bool:
    """Check a user against a set of roles, letting supervisors stand in for admins"""
    if user.role in roles:
        return True
    return user.role == ROLE_SUPERVISOR and ROLE_ADMIN in roles


def require_roles(*roles: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.delete("/customers/{customer_id}")
        async def delete_customer(
            customer_id: int,
            user: TokenUser = Depends(require_roles("admin"))
        ):
            # Only admins and supervisors can delete customers
            pass
    """
    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        if not has_any_role(user, roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(roles)}, your role: {user.role}"
            )
        return user

    return role_checker


# Guards matching the dashboard's screen permissions
require_admin = require_roles(ROLE_ADMIN)
require_order_viewer = require_roles(ROLE_USER, ROLE_FITTER, ROLE_FACTORY, ROLE_ADMIN)
require_order_creator = require_roles(ROLE_USER, ROLE_FITTER, ROLE_ADMIN)
require_customer_editor = require_roles(ROLE_FITTER, ROLE_ADMIN)
require_factory_viewer = require_roles(ROLE_FACTORY, ROLE_ADMIN)
require_catalog_viewer = require_roles(ROLE_USER, ROLE_ADMIN)
