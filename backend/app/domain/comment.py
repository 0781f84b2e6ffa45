"""
Comment Domain Models

Notes attached to an order. Internal comments are only shown to staff.

Author: TM3
Date: 2025-10-17
"""
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime


class CommentType(str, Enum):
    GENERAL = "general"
    STATUS_UPDATE = "status_update"
    PRODUCTION = "production"
    SHIPPING = "shipping"
    CUSTOMER = "customer"
    INTERNAL = "internal"


def _clean_content(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Comment content cannot be empty")
    return v


class Comment(BaseModel):
    id: int = Field(..., description="Comment ID")
    order_id: int = Field(..., description="Order the comment belongs to")
    user_id: int = Field(..., description="Author")
    content: str = Field(..., description="Comment text")
    type: CommentType = Field(CommentType.GENERAL, description="Comment category")
    is_internal: bool = Field(False, description="Visible to staff only")

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    # From JOIN with credentials (optional)
    user_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class CommentCreate(BaseModel):
    order_id: int = Field(..., gt=0)
    content: str = Field(..., max_length=5000)
    type: CommentType = CommentType.GENERAL
    is_internal: bool = False

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: Optional[str]) -> Optional[str]:
        return _clean_content(v)


class CommentUpdate(BaseModel):
    content: Optional[str] = Field(None, max_length=5000)
    type: Optional[CommentType] = None
    is_internal: Optional[bool] = None

    @field_validator("content")
    @classmethod
    def clean_content(cls, v: Optional[str]) -> Optional[str]:
        return _clean_content(v)
