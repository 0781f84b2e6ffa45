"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: TM3
Date: 2025-10-17
"""
from app.repositories.customer_repository import CustomerRepository
from app.repositories.partner_repository import FitterRepository, FactoryRepository
from app.repositories.catalog_repository import PresetRepository, BrandRepository, LeathertypeRepository
from app.repositories.comment_repository import CommentRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    'CustomerRepository',
    'FitterRepository',
    'FactoryRepository',
    'PresetRepository',
    'BrandRepository',
    'LeathertypeRepository',
    'CommentRepository',
    'OrderRepository',
    'UserRepository',
]
