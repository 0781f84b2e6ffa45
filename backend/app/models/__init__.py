"""
Database table models
"""
from .user import User
from .partner import Fitter, Factory
from .customer import Customer
from .catalog import Preset, Brand, Leathertype
from .order import Order
from .comment import Comment

__all__ = [
    "User",
    "Fitter",
    "Factory",
    "Customer",
    "Preset",
    "Brand",
    "Leathertype",
    "Order",
    "Comment",
]
