"""
Order comment table
"""
from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.behaviors import timestampable, soft_deletable
from app.core.database import Base
from app.models.mixins import TimestampMixin, SoftDeleteMixin


@timestampable()
@soft_deletable(deleted_by_field=None, allow_restore=False)
class Comment(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "comment"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("credentials.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    type = Column(String(30), nullable=False, server_default="general")
    is_internal = Column(Boolean, nullable=False, server_default="false")

    order = relationship("Order", back_populates="comments")
