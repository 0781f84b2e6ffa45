"""
Order Domain Models

Represents a saddle order and the rules that govern its lifecycle:
status transitions, cancellation, deposits, priority and assignment.

Author: TM3
Date: 2025-10-17
"""
import math
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from app.domain.exceptions import DomainError, InvalidStatusTransition
from app.domain.value_objects import OrderStatus, OrderPriority

# Orders whose deposit is below this share of the total still need one
DEPOSIT_THRESHOLD = Decimal('0.30')


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Order(BaseModel):
    """
    Order domain model - represents a saddle order

    Fields:
        id: Internal order ID (primary key)
        order_number: Human-readable order number (ORD-<ms>-<suffix>)

        # References
        customer_id, customer_name: Who the saddle is for
        fitter_id: Fitter who took the order
        factory_id: Factory building the saddle
        saddle_id, leather_id: Saddle model and leather type

        # Workflow
        status: Order status (see OrderStatus)
        priority: Order priority (see OrderPriority)
        is_urgent: True for urgent/critical priority or rushed orders

        # Saddle data
        saddle_specifications: Free-form configuration (JSON)
        measurements: Horse/rider measurements (JSON)
        seat_sizes: Seat sizes in European notation, e.g. ["17", "17,5"]
        special_instructions: Notes, including cancellation reasons

        # Financial information
        total_amount: Order total
        deposit_paid: Deposit received so far
        balance_owing: total_amount - deposit_paid

        # Dates
        estimated_delivery_date, actual_delivery_date
    """

    id: int = Field(..., description="Order ID")
    order_number: str = Field(..., description="Order number")

    customer_id: Optional[int] = Field(None, description="Customer ID")
    customer_name: Optional[str] = Field(None, description="Customer name at order time")
    fitter_id: Optional[int] = Field(None, description="Fitter ID")
    factory_id: Optional[int] = Field(None, description="Factory ID")
    saddle_id: Optional[int] = Field(None, description="Saddle model ID")
    leather_id: Optional[int] = Field(None, description="Leather type ID")

    status: OrderStatus = Field(OrderStatus.PENDING, description="Order status")
    priority: OrderPriority = Field(OrderPriority.NORMAL, description="Order priority")
    is_urgent: bool = Field(False, description="Urgent flag")

    saddle_specifications: Optional[Dict[str, Any]] = Field(None, description="Saddle configuration")
    measurements: Optional[Dict[str, Any]] = Field(None, description="Measurements")
    seat_sizes: Optional[List[str]] = Field(None, description="Seat sizes (European notation)")
    special_instructions: Optional[str] = Field(None, description="Special instructions")

    estimated_delivery_date: Optional[datetime] = Field(None, description="Estimated delivery")
    actual_delivery_date: Optional[datetime] = Field(None, description="Actual delivery")

    total_amount: Decimal = Field(Decimal('0'), description="Order total", ge=0)
    deposit_paid: Decimal = Field(Decimal('0'), description="Deposit paid", ge=0)
    balance_owing: Decimal = Field(Decimal('0'), description="Balance owing")

    fitter_stock: bool = False
    custom_order: bool = False
    repair: bool = False
    demo: bool = False
    sponsored: bool = False
    rushed: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    version: int = 1

    # From JOINs (optional)
    fitter_name: Optional[str] = None
    factory_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("seat_sizes", mode="before")
    @classmethod
    def empty_seat_sizes(cls, v):
        if v == []:
            return None
        return v

    # ------------------------------------------------------------------
    # Computed values
    # ------------------------------------------------------------------

    @property
    def is_overdue(self) -> bool:
        if self.estimated_delivery_date is None or self.status.is_final:
            return False
        return _aware(self.estimated_delivery_date) < _utcnow()

    @property
    def days_until_delivery(self) -> Optional[int]:
        """Whole days until the estimated delivery, rounded up; negative when late. None once final"""
        if self.estimated_delivery_date is None or self.status.is_final:
            return None
        delta = _aware(self.estimated_delivery_date) - _utcnow()
        return math.ceil(delta.total_seconds() / 86400)

    @property
    def payment_percentage(self) -> float:
        if not self.total_amount:
            return 0.0
        pct = (self.deposit_paid / self.total_amount * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        return float(pct)

    @property
    def requires_deposit(self) -> bool:
        if self.total_amount <= 0:
            return False
        return self.deposit_paid < self.total_amount * DEPOSIT_THRESHOLD

    @property
    def possible_transitions(self) -> List[OrderStatus]:
        return self.status.possible_transitions()

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    def _ensure_not_final(self, action: str):
        if self.status.is_final:
            raise DomainError(f"Cannot {action} on an order in final status {self.status.value}")

    def change_status(self, new_status: OrderStatus, now: Optional[datetime] = None):
        if not self.status.can_transition_to(new_status):
            raise InvalidStatusTransition(self.status.value, new_status.value)

        self.status = new_status
        if new_status == OrderStatus.DELIVERED:
            self.actual_delivery_date = now or _utcnow()

    def cancel(self, reason: str):
        if not reason or not reason.strip():
            raise DomainError("Cancellation reason is required")
        if not self.status.can_be_cancelled:
            raise DomainError(f"Order in status {self.status.value} cannot be cancelled")

        self.status = OrderStatus.CANCELLED
        note = f"Cancellation reason: {reason.strip()}"
        if self.special_instructions:
            self.special_instructions = f"{self.special_instructions}\n{note}"
        else:
            self.special_instructions = note

    def record_deposit(self, amount: Decimal):
        amount = Decimal(str(amount))
        if amount <= 0:
            raise DomainError("Deposit amount must be positive")

        new_deposit = self.deposit_paid + amount
        if new_deposit > self.total_amount:
            raise DomainError(
                f"Deposit {new_deposit} would exceed order total {self.total_amount}"
            )

        self.deposit_paid = new_deposit
        self.balance_owing = self.total_amount - new_deposit

    def update_priority(self, priority: OrderPriority):
        self._ensure_not_final("change priority")
        self.priority = priority
        self.is_urgent = priority.is_urgent

    def assign_fitter(self, fitter_id: int):
        self._ensure_not_final("assign fitter")
        if fitter_id is None or fitter_id <= 0:
            raise DomainError("Fitter ID must be a positive integer")
        self.fitter_id = fitter_id

    def assign_factory(self, factory_id: int):
        self._ensure_not_final("assign factory")
        if factory_id is None or factory_id <= 0:
            raise DomainError("Factory ID must be a positive integer")
        self.factory_id = factory_id

    def update_measurements(self, measurements: Dict[str, Any]):
        self._ensure_not_final("update measurements")
        self.measurements = measurements

    def update_estimated_delivery(self, delivery_date: datetime, now: Optional[datetime] = None):
        self._ensure_not_final("update delivery date")
        if _aware(delivery_date) <= (now or _utcnow()):
            raise DomainError("Estimated delivery date must be in the future")
        self.estimated_delivery_date = delivery_date

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion and computed fields"""
        data = self.model_dump(mode="json")

        for field in ['total_amount', 'deposit_paid', 'balance_owing']:
            data[field] = float(getattr(self, field))

        data['is_overdue'] = self.is_overdue
        data['days_until_delivery'] = self.days_until_delivery
        data['payment_percentage'] = self.payment_percentage
        data['requires_deposit'] = self.requires_deposit
        data['priority_color'] = self.priority.color
        data['possible_transitions'] = [s.value for s in self.possible_transitions]

        return data


class OrderCreate(BaseModel):
    """
    Payload for creating an order.

    Prices may be given in cents (price_saddle / price_deposit, as the
    order form sends them) or as decimal amounts (total_amount / deposit_paid).
    """

    customer_id: Optional[int] = Field(None, gt=0)
    customer_name: Optional[str] = Field(None, max_length=255)
    fitter_id: Optional[int] = Field(None, gt=0)
    factory_id: Optional[int] = Field(None, gt=0)
    saddle_id: Optional[int] = Field(None, gt=0)
    leather_id: Optional[int] = Field(None, gt=0)

    priority: Optional[OrderPriority] = None
    rushed: bool = False

    price_saddle: Optional[int] = Field(None, ge=0, description="Saddle price in cents")
    price_deposit: Optional[int] = Field(None, ge=0, description="Deposit in cents")
    total_amount: Optional[Decimal] = Field(None, ge=0)
    deposit_paid: Optional[Decimal] = Field(None, ge=0)

    saddle_specifications: Optional[Dict[str, Any]] = None
    measurements: Optional[Dict[str, Any]] = None
    seat_sizes: Optional[List[str]] = None
    special_instructions: Optional[str] = None
    estimated_delivery_date: Optional[datetime] = None

    fitter_stock: bool = False
    custom_order: bool = False
    repair: bool = False
    demo: bool = False
    sponsored: bool = False


class OrderUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, max_length=255)
    fitter_id: Optional[int] = Field(None, gt=0)
    factory_id: Optional[int] = Field(None, gt=0)
    saddle_id: Optional[int] = Field(None, gt=0)
    leather_id: Optional[int] = Field(None, gt=0)
    priority: Optional[OrderPriority] = None
    saddle_specifications: Optional[Dict[str, Any]] = None
    measurements: Optional[Dict[str, Any]] = None
    seat_sizes: Optional[List[str]] = None
    special_instructions: Optional[str] = None
    estimated_delivery_date: Optional[datetime] = None
    fitter_stock: Optional[bool] = None
    custom_order: Optional[bool] = None
    repair: Optional[bool] = None
    demo: Optional[bool] = None
    sponsored: Optional[bool] = None
    version: Optional[int] = Field(None, ge=1, description="Expected version for optimistic locking")


class StatusChangeRequest(BaseModel):
    status: OrderStatus
    version: Optional[int] = Field(None, ge=1)


class CancelRequest(BaseModel):
    reason: str = Field(..., description="Why the order is cancelled")


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Deposit amount")
