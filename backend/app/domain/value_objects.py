"""
Value Objects

Small immutable types that validate themselves on construction:
emails, entity ids, customer status, order status and order priority.

Author: TM3
Date: 2025-10-17
"""
import re
from enum import Enum
from typing import List, Union


class Email:
    """
    Email address, normalized to lower case.

    Raises ValueError for empty, overlong or malformed addresses.
    """

    MAX_LENGTH = 300
    PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if value is None or not str(value).strip():
            raise ValueError("Email cannot be empty")

        normalized = str(value).strip().lower()

        if len(normalized) > self.MAX_LENGTH:
            raise ValueError(f"Email cannot exceed {self.MAX_LENGTH} characters")
        if not self.PATTERN.match(normalized):
            raise ValueError(f"Invalid email format: {value}")

        self._value = normalized

    @property
    def value(self) -> str:
        return self._value

    @property
    def domain(self) -> str:
        return self._value.split("@", 1)[1]

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"Email({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Email) and other._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)


class EntityId:
    """
    Positive integer identifier.

    Subclasses only change the label used in error messages.
    """

    label = "Entity ID"

    __slots__ = ("_value",)

    def __init__(self, value: Union[int, str]):
        if isinstance(value, bool):
            raise ValueError(f"{self.label} must be an integer")
        if isinstance(value, str):
            value = self._parse(value)
        if not isinstance(value, int):
            raise ValueError(f"{self.label} must be an integer")
        if value <= 0:
            raise ValueError(f"{self.label} must be a positive integer")
        self._value = value

    @classmethod
    def _parse(cls, raw: str) -> int:
        raw = raw.strip()
        if not raw.isdigit():
            raise ValueError(f"Invalid {cls.label}: {raw!r}")
        return int(raw)

    @classmethod
    def from_string(cls, raw: str):
        return cls(cls._parse(raw))

    @property
    def value(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and other._value == self._value

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))


class CustomerId(EntityId):
    label = "Customer ID"


class BrandId(EntityId):
    label = "Brand ID"


class PresetId(EntityId):
    label = "Preset ID"


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"

    @classmethod
    def from_string(cls, raw: str) -> "CustomerStatus":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid customer status: {raw}")


class OrderStatus(str, Enum):
    """
    Lifecycle of a saddle order.

    pending -> confirmed -> in_production -> quality_control
    -> ready_for_shipping -> shipped -> (shipped_to_customer) -> delivered,
    with cancellation possible until shipping and returns after it.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PRODUCTION = "in_production"
    QUALITY_CONTROL = "quality_control"
    READY_FOR_SHIPPING = "ready_for_shipping"
    SHIPPED = "shipped"
    SHIPPED_TO_CUSTOMER = "shipped_to_customer"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    @classmethod
    def from_string(cls, raw: str) -> "OrderStatus":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid order status: {raw}")

    def possible_transitions(self) -> List["OrderStatus"]:
        return list(_STATUS_TRANSITIONS[self])

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in _STATUS_TRANSITIONS[self]

    @property
    def is_final(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.RETURNED)

    @property
    def is_in_production(self) -> bool:
        return self in (OrderStatus.IN_PRODUCTION, OrderStatus.QUALITY_CONTROL)

    @property
    def can_be_cancelled(self) -> bool:
        return OrderStatus.CANCELLED in _STATUS_TRANSITIONS[self]

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    OrderStatus.CONFIRMED: (OrderStatus.IN_PRODUCTION, OrderStatus.CANCELLED),
    OrderStatus.IN_PRODUCTION: (OrderStatus.QUALITY_CONTROL, OrderStatus.CANCELLED),
    OrderStatus.QUALITY_CONTROL: (
        OrderStatus.READY_FOR_SHIPPING,
        OrderStatus.IN_PRODUCTION,
        OrderStatus.CANCELLED,
    ),
    OrderStatus.READY_FOR_SHIPPING: (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    OrderStatus.SHIPPED: (
        OrderStatus.SHIPPED_TO_CUSTOMER,
        OrderStatus.DELIVERED,
        OrderStatus.RETURNED,
    ),
    OrderStatus.SHIPPED_TO_CUSTOMER: (OrderStatus.DELIVERED, OrderStatus.RETURNED),
    OrderStatus.DELIVERED: (OrderStatus.RETURNED,),
    OrderStatus.CANCELLED: (),
    OrderStatus.RETURNED: (),
}


class OrderPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
    CRITICAL = "critical"

    @classmethod
    def from_string(cls, raw: str) -> "OrderPriority":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid order priority: {raw}")

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]

    @property
    def is_urgent(self) -> bool:
        return self in (OrderPriority.URGENT, OrderPriority.CRITICAL)

    @property
    def color(self) -> str:
        return _PRIORITY_COLORS[self]

    @property
    def display_name(self) -> str:
        return self.value.title()

    def is_higher_than(self, other: "OrderPriority") -> bool:
        return self.weight > other.weight


_PRIORITY_WEIGHTS = {
    OrderPriority.LOW: 1,
    OrderPriority.NORMAL: 2,
    OrderPriority.HIGH: 3,
    OrderPriority.URGENT: 4,
    OrderPriority.CRITICAL: 5,
}

# Badge colors used by the dashboard
_PRIORITY_COLORS = {
    OrderPriority.LOW: "#28a745",
    OrderPriority.NORMAL: "#007bff",
    OrderPriority.HIGH: "#ffc107",
    OrderPriority.URGENT: "#fd7e14",
    OrderPriority.CRITICAL: "#dc3545",
}
