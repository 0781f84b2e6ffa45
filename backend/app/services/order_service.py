"""
Order Service
Business workflows around saddle orders: creation, status changes,
cancellation, deposits and edits, with per-role visibility.

Author: TM3
Date: 2025-10-17
"""
import logging
import secrets
import string
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Optional

from app.core.auth import TokenUser, ROLE_FITTER, ROLE_FACTORY
from app.domain.exceptions import DomainError
from app.domain.order import Order, OrderCreate, OrderUpdate
from app.domain.value_objects import OrderPriority, OrderStatus
from app.repositories.customer_repository import CustomerRepository
from app.repositories.order_repository import OrderRepository
from app.services.seat_size_service import seat_size_extractor, normalize_seat_size, merge_seat_sizes

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "ORD"
ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
ORDER_SUFFIX_LENGTH = 6

CENTS = Decimal("100")


def generate_order_number() -> str:
    """ORD-<epoch milliseconds>-<6 random upper-case letters/digits>"""
    suffix = "".join(secrets.choice(ORDER_SUFFIX_ALPHABET) for _ in range(ORDER_SUFFIX_LENGTH))
    return f"{ORDER_NUMBER_PREFIX}-{int(time.time() * 1000)}-{suffix}"


def cents_to_amount(cents: Optional[int]) -> Decimal:
    if cents is None:
        return Decimal("0.00")
    return (Decimal(cents) / CENTS).quantize(Decimal("0.01"))


def scope_filters(user: TokenUser) -> Dict[str, Optional[int]]:
    """
    Row filters for the orders a user may see.

    Fitters see their own orders and factories the ones assigned to them.
    An account with no linked fitter/factory row sees nothing (id 0).
    """
    if user.role == ROLE_FITTER:
        return {"fitter_id": user.fitter_id or 0, "factory_id": None}
    if user.role == ROLE_FACTORY:
        return {"fitter_id": None, "factory_id": user.factory_id or 0}
    return {"fitter_id": None, "factory_id": None}


def is_visible_to(order: Order, user: TokenUser) -> bool:
    scope = scope_filters(user)
    if scope["fitter_id"] is not None and order.fitter_id != scope["fitter_id"]:
        return False
    if scope["factory_id"] is not None and order.factory_id != scope["factory_id"]:
        return False
    return True


def _read_version(order: Order, expected_version: Optional[int]) -> Optional[int]:
    """Version the save must still find under the row lock"""
    return expected_version if expected_version is not None else order.version


class OrderService:
    """
    Service for order workflows

    Handles:
    - Order creation (numbering, cent conversion, rush priority, seat sizes)
    - Status transitions and cancellation
    - Deposits
    - Field edits with optimistic locking
    """

    def __init__(self, order_repository: OrderRepository = None,
                 customer_repository: CustomerRepository = None):
        self.orders = order_repository or OrderRepository()
        self.customers = customer_repository or CustomerRepository()

    def get_order(self, order_id: int, user: TokenUser) -> Optional[Order]:
        """Order by ID, or None when it doesn't exist or the user can't see it"""
        order = self.orders.find_by_id(order_id)
        if order is None or not is_visible_to(order, user):
            return None
        return order

    def create_order(self, data: OrderCreate, user: TokenUser) -> Order:
        """
        Create an order from the order form

        Raises:
            DomainError: unknown or inactive customer, deposit above total,
                         delivery date in the past
        """
        customer_name = data.customer_name
        fitter_id = data.fitter_id

        if data.customer_id is not None:
            customer = self.customers.find_by_id(data.customer_id)
            if customer is None:
                raise DomainError(f"Customer {data.customer_id} not found")
            customer.validate_for_order()
            customer_name = customer_name or customer.name
            if fitter_id is None:
                fitter_id = customer.fitter_id

        # Fitters always order for themselves
        if user.role == ROLE_FITTER:
            fitter_id = user.fitter_id

        if data.price_saddle is not None:
            total = cents_to_amount(data.price_saddle)
        else:
            total = Decimal(data.total_amount or 0)

        if data.price_deposit is not None:
            deposit = cents_to_amount(data.price_deposit)
        else:
            deposit = Decimal(data.deposit_paid or 0)

        if deposit > total:
            raise DomainError(f"Deposit {deposit} cannot exceed order total {total}")

        if data.rushed:
            priority = OrderPriority.URGENT
        else:
            priority = data.priority or OrderPriority.NORMAL

        if data.estimated_delivery_date is not None:
            delivery = data.estimated_delivery_date
            if delivery.tzinfo is None:
                delivery = delivery.replace(tzinfo=timezone.utc)
            if delivery <= datetime.now(timezone.utc):
                raise DomainError("Estimated delivery date must be in the future")

        seat_sizes = merge_seat_sizes(data.seat_sizes, seat_size_extractor.from_notes(data.special_instructions))

        payload = {
            'order_number': generate_order_number(),
            'customer_id': data.customer_id,
            'customer_name': customer_name,
            'fitter_id': fitter_id,
            'factory_id': data.factory_id,
            'saddle_id': data.saddle_id,
            'leather_id': data.leather_id,
            'status': OrderStatus.PENDING,
            'priority': priority,
            'is_urgent': priority.is_urgent or data.rushed,
            'rushed': data.rushed,
            'saddle_specifications': data.saddle_specifications,
            'measurements': data.measurements,
            'seat_sizes': seat_sizes or None,
            'special_instructions': data.special_instructions,
            'estimated_delivery_date': data.estimated_delivery_date,
            'total_amount': total,
            'deposit_paid': deposit,
            'balance_owing': total - deposit,
            'fitter_stock': data.fitter_stock,
            'custom_order': data.custom_order,
            'repair': data.repair,
            'demo': data.demo,
            'sponsored': data.sponsored,
        }

        order = self.orders.create(payload, user_id=user.id)
        logger.info(f"Order {order.order_number} created by user {user.id}")
        return order

    def update_order(self, order_id: int, data: OrderUpdate, user: TokenUser) -> Optional[Order]:
        """
        Apply a partial edit through the domain rules

        Raises:
            DomainError: edit not allowed in the current status
            ConflictError: stale version
        """
        order = self.get_order(order_id, user)
        if order is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        expected_version = changes.pop('version', None)
        if not changes:
            raise DomainError("No fields to update")

        if 'priority' in changes and changes['priority'] is not None:
            order.update_priority(OrderPriority(changes.pop('priority')))
        if 'fitter_id' in changes and changes['fitter_id'] is not None:
            order.assign_fitter(changes.pop('fitter_id'))
        if 'factory_id' in changes and changes['factory_id'] is not None:
            order.assign_factory(changes.pop('factory_id'))
        if 'measurements' in changes:
            order.update_measurements(changes.pop('measurements'))
        if 'estimated_delivery_date' in changes and changes['estimated_delivery_date'] is not None:
            order.update_estimated_delivery(changes.pop('estimated_delivery_date'))
        if 'seat_sizes' in changes and changes['seat_sizes'] is not None:
            changes['seat_sizes'] = [normalize_seat_size(s) for s in changes['seat_sizes']] or None

        for field, value in changes.items():
            if value is not None:
                setattr(order, field, value)

        return self.orders.save(order, user_id=user.id, expected_version=_read_version(order, expected_version))

    def change_status(self, order_id: int, new_status: OrderStatus, user: TokenUser,
                      expected_version: Optional[int] = None) -> Optional[Order]:
        """
        Move an order to a new status

        Raises:
            InvalidStatusTransition: the move isn't allowed from the current status
        """
        order = self.get_order(order_id, user)
        if order is None:
            return None

        previous = order.status
        order.change_status(new_status)
        saved = self.orders.save(order, user_id=user.id, expected_version=_read_version(order, expected_version))
        logger.info(f"Order {order.order_number} status {previous.value} -> {new_status.value} by user {user.id}")
        return saved

    def cancel_order(self, order_id: int, reason: str, user: TokenUser) -> Optional[Order]:
        order = self.get_order(order_id, user)
        if order is None:
            return None

        order.cancel(reason)
        saved = self.orders.save(order, user_id=user.id, expected_version=order.version)
        logger.info(f"Order {order.order_number} cancelled by user {user.id}: {reason.strip()}")
        return saved

    def record_deposit(self, order_id: int, amount: Decimal, user: TokenUser) -> Optional[Order]:
        order = self.get_order(order_id, user)
        if order is None:
            return None

        order.record_deposit(amount)
        saved = self.orders.save(order, user_id=user.id, expected_version=order.version)
        logger.info(f"Deposit of {amount} recorded on order {order.order_number}; balance {order.balance_owing}")
        return saved

    def delete_order(self, order_id: int, user: TokenUser) -> bool:
        order = self.get_order(order_id, user)
        if order is None:
            return False
        return self.orders.soft_delete(order_id, user_id=user.id)
