"""
Customer Domain Models

A customer is a rider (and horse) that orders saddles, usually looked after
by a fitter.

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from app.domain.exceptions import DomainError
from app.domain.value_objects import Email, CustomerStatus


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(Email(value))


class Customer(BaseModel):
    """
    Customer domain model

    Fields:
        id: Internal customer ID
        name: Customer (rider) name
        email: Contact email, lower-cased
        horse_name: Name of the horse the saddle is fitted to
        company, address, city, state, zipcode, country: Contact data
        phone_no, cell_no: Phone numbers
        bank_account_number: Payment reference
        fitter_id: Fitter responsible for the customer
        status: active / inactive / suspended

        # Audit (managed by behaviors)
        created_at, updated_at, created_by, updated_by
        deleted_at, deleted_by, version
    """

    id: int = Field(..., description="Customer ID")
    name: str = Field(..., description="Customer name")
    email: Optional[str] = Field(None, description="Customer email")
    horse_name: Optional[str] = Field(None, description="Horse name")
    company: Optional[str] = Field(None, description="Company")
    address: Optional[str] = Field(None, description="Street address")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State / province")
    zipcode: Optional[str] = Field(None, description="Postal code")
    country: Optional[str] = Field(None, description="Country")
    phone_no: Optional[str] = Field(None, description="Phone number")
    cell_no: Optional[str] = Field(None, description="Mobile number")
    bank_account_number: Optional[str] = Field(None, description="Bank account number")
    fitter_id: Optional[int] = Field(None, description="Assigned fitter ID")
    status: CustomerStatus = Field(CustomerStatus.ACTIVE, description="Customer status")

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    version: int = 1

    # From JOIN with fitters (optional)
    fitter_name: Optional[str] = Field(None, description="Assigned fitter name")

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        """Name followed by the email in parentheses, when an email is known"""
        if self.email:
            return f"{self.name} ({self.email})"
        return self.name

    @property
    def location(self) -> str:
        parts = [p for p in (self.city, self.state, self.country) if p]
        return ", ".join(parts) if parts else "No location"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_deleted and self.status == CustomerStatus.ACTIVE

    @property
    def has_fitter(self) -> bool:
        return self.fitter_id is not None

    def validate_for_order(self):
        """Raise DomainError when the customer cannot place an order"""
        if self.is_deleted:
            raise DomainError(f"Customer {self.id} has been deleted")
        if self.status != CustomerStatus.ACTIVE:
            raise DomainError(f"Customer {self.id} is {self.status.value} and cannot place orders")
        if not self.name or not self.name.strip():
            raise DomainError(f"Customer {self.id} has no name")

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['display_name'] = self.display_name
        data['location'] = self.location
        data['is_active'] = self.is_active
        data['has_fitter'] = self.has_fitter
        return data


class CustomerCreate(BaseModel):
    """Payload for creating a customer"""

    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=300)
    horse_name: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zipcode: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    phone_no: Optional[str] = Field(None, max_length=50)
    cell_no: Optional[str] = Field(None, max_length=50)
    bank_account_number: Optional[str] = Field(None, max_length=100)
    fitter_id: Optional[int] = Field(None, gt=0)
    status: CustomerStatus = CustomerStatus.ACTIVE

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Customer name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class CustomerUpdate(BaseModel):
    """Partial update; only fields that were sent are written"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=300)
    horse_name: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zipcode: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    phone_no: Optional[str] = Field(None, max_length=50)
    cell_no: Optional[str] = Field(None, max_length=50)
    bank_account_number: Optional[str] = Field(None, max_length=100)
    fitter_id: Optional[int] = Field(None, gt=0)
    status: Optional[CustomerStatus] = None
    version: Optional[int] = Field(None, ge=1, description="Expected version for optimistic locking")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)
