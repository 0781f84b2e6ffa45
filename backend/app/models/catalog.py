"""
Catalog tables: presets, brands and leather types
"""
from sqlalchemy import Column, Integer, String, Index, text

from app.behaviors import timestampable, blameable, soft_deletable
from app.core.database import Base
from app.models.mixins import TimestampMixin, BlameMixin, SoftDeleteMixin


@timestampable()
@blameable()
@soft_deletable()
class Preset(TimestampMixin, BlameMixin, SoftDeleteMixin, Base):
    __tablename__ = "presets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    sequence = Column(Integer, nullable=False, server_default="0")

    __table_args__ = (
        Index("uq_presets_name_active", "name", unique=True, postgresql_where=text("deleted_at IS NULL")),
    )


@timestampable()
class Brand(TimestampMixin, Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)


@timestampable()
@blameable()
@soft_deletable()
class Leathertype(TimestampMixin, BlameMixin, SoftDeleteMixin, Base):
    __tablename__ = "leather_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    sequence = Column(Integer, nullable=False, server_default="0")

    __table_args__ = (
        Index("uq_leather_types_name_active", "name", unique=True, postgresql_where=text("deleted_at IS NULL")),
    )
