"""
Column mixins for the audit, soft-delete and version columns
"""
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())


class BlameMixin:
    created_by = Column(Integer)
    updated_by = Column(Integer)


class SoftDeleteMixin:
    deleted_at = Column(DateTime(timezone=True), index=True)
    deleted_by = Column(Integer)


class VersionMixin:
    version = Column(Integer, nullable=False, server_default="1")
