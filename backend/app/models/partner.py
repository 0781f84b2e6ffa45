"""
Fitter and factory tables
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.behaviors import timestampable, blameable, soft_deletable
from app.core.database import Base
from app.models.mixins import TimestampMixin, BlameMixin, SoftDeleteMixin


class PartnerColumns:
    """Contact columns shared by fitters and factories"""
    address = Column(Text)
    zipcode = Column(String(20))
    state = Column(String(100))
    city = Column(String(100), index=True)
    country = Column(String(100), index=True)
    phone_no = Column(String(50))
    cell_no = Column(String(50))
    currency = Column(String(3))
    emailaddress = Column(String(300))


@timestampable()
@blameable()
@soft_deletable()
class Fitter(PartnerColumns, TimestampMixin, BlameMixin, SoftDeleteMixin, Base):
    __tablename__ = "fitters"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credentials.id"), index=True, nullable=False)

    customers = relationship("Customer", back_populates="fitter")
    orders = relationship("Order", back_populates="fitter")


@timestampable()
@blameable()
@soft_deletable()
class Factory(PartnerColumns, TimestampMixin, BlameMixin, SoftDeleteMixin, Base):
    __tablename__ = "factories"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credentials.id"), index=True, nullable=False)

    orders = relationship("Order", back_populates="factory")
