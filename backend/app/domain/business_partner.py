"""
Fitter and Factory Domain Models

Fitters measure horses and sell saddles; factories build them. Both are
linked to a login user and share the same contact layout.

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from app.domain.value_objects import Email


class BusinessPartner(BaseModel):
    """Contact data shared by fitters and factories"""

    id: int = Field(..., description="Internal ID")
    user_id: Optional[int] = Field(None, description="Linked login user")
    name: Optional[str] = Field(None, description="Name from the linked user")
    address: Optional[str] = None
    zipcode: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone_no: Optional[str] = None
    cell_no: Optional[str] = None
    currency: Optional[str] = Field(None, description="Invoicing currency (ISO code)")
    emailaddress: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def display_name(self) -> str:
        label = self.name or self.emailaddress or f"#{self.id}"
        if self.city:
            return f"{label} - {self.city}"
        return label

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['display_name'] = self.display_name
        data['is_active'] = self.is_active
        return data


class Fitter(BusinessPartner):
    pass


class Factory(BusinessPartner):
    pass


class BusinessPartnerWrite(BaseModel):
    user_id: Optional[int] = Field(None, gt=0)
    address: Optional[str] = None
    zipcode: Optional[str] = Field(None, max_length=20)
    state: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    phone_no: Optional[str] = Field(None, max_length=50)
    cell_no: Optional[str] = Field(None, max_length=50)
    currency: Optional[str] = Field(None, max_length=3)
    emailaddress: Optional[str] = Field(None, max_length=300)

    @field_validator("emailaddress")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return str(Email(v))

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v


class FitterCreate(BusinessPartnerWrite):
    user_id: int = Field(..., gt=0)


class FitterUpdate(BusinessPartnerWrite):
    pass


class FactoryCreate(BusinessPartnerWrite):
    user_id: int = Field(..., gt=0)


class FactoryUpdate(BusinessPartnerWrite):
    pass
