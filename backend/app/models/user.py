"""
Login accounts (credentials table)
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime

from app.behaviors import timestampable
from app.core.database import Base
from app.models.mixins import TimestampMixin


@timestampable()
class User(TimestampMixin, Base):
    __tablename__ = "credentials"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True)
    email = Column(String(300), nullable=False, unique=True, index=True)
    full_name = Column(String(255))
    password_hash = Column(String(255), nullable=False)
    # Legacy type codes: 1 fitter, 2 admin, 3 factory, 4 custom saddler
    user_type = Column(Integer)
    is_supervisor = Column(Boolean, nullable=False, server_default="false")
    is_active = Column(Boolean, nullable=False, server_default="true")
    failed_login_attempts = Column(Integer, nullable=False, server_default="0")
    locked_until = Column(DateTime(timezone=True))
    last_login_at = Column(DateTime(timezone=True))
