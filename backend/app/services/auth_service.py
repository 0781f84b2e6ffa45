"""
Authentication Service
Password login with account lockout, and mapping of legacy user types to
API roles.

Author: TM3
Date: 2025-10-17
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from passlib.context import CryptContext

from app.core.auth import (
    create_access_token,
    ROLE_USER, ROLE_FITTER, ROLE_FACTORY, ROLE_CUSTOMSADDLER, ROLE_ADMIN, ROLE_SUPERVISOR,
)
from app.core.config import settings
from app.domain.user import User, TokenResponse
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Password hashing context (bcrypt hashes shared with the legacy app)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Legacy credentials.user_type codes
USER_TYPE_FITTER = 1
USER_TYPE_ADMIN = 2
USER_TYPE_FACTORY = 3
USER_TYPE_CUSTOMSADDLER = 4


class AuthenticationError(Exception):
    """Login failed; errors maps the offending field to a reason code"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))


def resolve_role(user_type: Optional[int], is_supervisor: bool, has_fitter_row: bool) -> str:
    """
    Work out the API role of an account.

    The supervisor flag wins over everything. user_type 1 only makes a
    fitter when a fitter row exists; an account with a fitter row but
    another unknown type is still a fitter.
    """
    if is_supervisor:
        return ROLE_SUPERVISOR
    if user_type == USER_TYPE_ADMIN:
        return ROLE_ADMIN
    if user_type == USER_TYPE_FACTORY:
        return ROLE_FACTORY
    if user_type == USER_TYPE_CUSTOMSADDLER:
        return ROLE_CUSTOMSADDLER
    if has_fitter_row:
        return ROLE_FITTER
    return ROLE_USER


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed hash in the table
        logger.warning("Unreadable password hash encountered during login")
        return False


class AuthService:

    def __init__(self, user_repository: UserRepository = None):
        self.users = user_repository or UserRepository()

    def with_role(self, user: User) -> User:
        user.role = resolve_role(user.user_type, user.is_supervisor, user.fitter_id is not None)
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        user = self.users.find_by_id(user_id)
        return self.with_role(user) if user else None

    def authenticate(self, identifier: str, password: str, now: Optional[datetime] = None) -> User:
        """
        Check credentials and update the lockout counters

        Raises:
            AuthenticationError: unknown account, locked account or wrong password
        """
        now = now or datetime.now(timezone.utc)
        user = self.users.find_by_login(identifier.strip())

        if user is None:
            logger.info(f"Login failed: unknown account {identifier!r}")
            raise AuthenticationError({"email": "notFound"})

        if user.is_locked(now):
            logger.warning(f"Login refused: account {user.id} locked until {user.locked_until}")
            raise AuthenticationError({"account": "locked"})

        if not verify_password(password, user.password_hash):
            attempts = user.failed_login_attempts + 1
            locked_until = None
            if attempts >= settings.MAX_FAILED_LOGIN_ATTEMPTS:
                locked_until = now + timedelta(minutes=settings.ACCOUNT_LOCKOUT_MINUTES)
                logger.warning(f"Account {user.id} locked after {attempts} failed logins")
                attempts = 0
            self.users.record_failed_login(user.id, attempts, locked_until)
            raise AuthenticationError({"password": "incorrectPassword"})

        self.users.record_successful_login(user.id)
        return self.with_role(user)

    def login(self, identifier: str, password: str) -> TokenResponse:
        user = self.authenticate(identifier, password)
        token = create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            name=user.display_name,
            fitter_id=user.fitter_id,
            factory_id=user.factory_id,
        )
        logger.info(f"User {user.id} logged in as {user.role}")
        return TokenResponse(
            access_token=token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=user.to_dict(),
        )
