"""
Customer table
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.behaviors import timestampable, blameable, soft_deletable, versionable
from app.core.database import Base
from app.models.mixins import TimestampMixin, BlameMixin, SoftDeleteMixin, VersionMixin


@timestampable()
@blameable()
@soft_deletable()
@versionable()
class Customer(TimestampMixin, BlameMixin, SoftDeleteMixin, VersionMixin, Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(300), index=True)
    horse_name = Column(String(255))
    company = Column(String(255))
    address = Column(Text)
    city = Column(String(100), index=True)
    state = Column(String(100))
    zipcode = Column(String(20))
    country = Column(String(100), index=True)
    phone_no = Column(String(50))
    cell_no = Column(String(50))
    bank_account_number = Column(String(100))
    fitter_id = Column(Integer, ForeignKey("fitters.id"), index=True)
    status = Column(String(20), nullable=False, server_default="active", index=True)

    fitter = relationship("Fitter", back_populates="customers")
    orders = relationship("Order", back_populates="customer")
