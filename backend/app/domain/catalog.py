"""
Catalog Domain Models

Presets (saved saddle configurations), saddle brands and leather types.
Names are unique among the rows that are not deleted.

Author: TM3
Date: 2025-10-17
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


def _clean_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Name cannot be empty")
    return v


class Preset(BaseModel):
    """Saved saddle configuration template"""

    id: int = Field(..., description="Preset ID")
    name: str = Field(..., description="Preset name")
    sequence: int = Field(0, description="Display order")

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
        return f"{self.sequence}. {self.name}"

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['display_name'] = self.display_name
        data['is_active'] = self.is_active
        return data


class PresetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sequence: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


class PresetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sequence: Optional[int] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


class Brand(BaseModel):
    """Saddle brand. Brands are removed for good, not soft-deleted."""

    id: int = Field(..., description="Brand ID")
    name: str = Field(..., description="Brand name")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def display_name(self) -> str:
        return self.name

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['display_name'] = self.display_name
        return data


class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


class BrandUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


class Leathertype(BaseModel):
    """Leather used for a saddle's seat and flaps"""

    id: int = Field(..., description="Leather type ID")
    name: str = Field(..., description="Leather type name")
    sequence: int = Field(0, description="Display order")

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

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['is_active'] = self.is_active
        return data


class LeathertypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sequence: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)


class LeathertypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sequence: Optional[int] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)
