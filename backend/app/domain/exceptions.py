"""
Domain exceptions

Raised by domain models, behaviors and services; routers translate them
into HTTP status codes (DomainError -> 400, ConflictError -> 409).
"""


class DomainError(ValueError):
    """A business rule was violated"""


class ConflictError(DomainError):
    """The write conflicts with existing state (duplicate name, stale version)"""


class InvalidStatusTransition(DomainError):
    """An order was asked to move to a status it cannot reach"""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid status transition from {current} to {target}")
