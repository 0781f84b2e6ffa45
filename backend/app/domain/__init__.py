"""
Domain Layer - Business Entities

This layer contains Pydantic models and value objects representing the
saddle ordering business. They enforce type safety and validation across
the application.

Author: TM3
Date: 2025-10-17
"""
from app.domain.customer import Customer
from app.domain.business_partner import Fitter, Factory
from app.domain.catalog import Preset, Brand, Leathertype
from app.domain.comment import Comment
from app.domain.order import Order
from app.domain.user import User

__all__ = ['Customer', 'Fitter', 'Factory', 'Preset', 'Brand', 'Leathertype', 'Comment', 'Order', 'User']
