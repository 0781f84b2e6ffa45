"""
Customer Service
Customer workflows that need more than one repository: fitter assignment,
status changes, integrity checks and bulk imports.

Author: TM3
Date: 2025-10-17
"""
import logging
from typing import Any, Dict, List, Optional

from app.core.auth import TokenUser, ROLE_FITTER
from app.domain.customer import Customer, CustomerCreate, CustomerUpdate
from app.domain.exceptions import DomainError
from app.domain.value_objects import CustomerStatus, Email
from app.repositories.customer_repository import CustomerRepository
from app.repositories.partner_repository import FitterRepository

logger = logging.getLogger(__name__)

# Columns the customers table declares NOT NULL
REQUIRED_FIELDS = ('name', 'status')


def customer_visible_to(customer: Customer, user: TokenUser) -> bool:
    """Fitters only see their own customers"""
    if user.role == ROLE_FITTER:
        return customer.fitter_id is not None and customer.fitter_id == user.fitter_id
    return True


class CustomerService:

    def __init__(self, customer_repository: CustomerRepository = None,
                 fitter_repository: FitterRepository = None):
        self.customers = customer_repository or CustomerRepository()
        self.fitters = fitter_repository or FitterRepository()

    def get_customer(self, customer_id: int, user: TokenUser) -> Optional[Customer]:
        customer = self.customers.find_by_id(customer_id)
        if customer is None or not customer_visible_to(customer, user):
            return None
        return customer

    def _check_fitter(self, fitter_id: Optional[int]):
        if fitter_id is not None and self.fitters.find_by_id(fitter_id) is None:
            raise DomainError(f"Fitter {fitter_id} not found")

    def create_customer(self, data: CustomerCreate, user: TokenUser) -> Customer:
        payload = data.model_dump()
        if user.role == ROLE_FITTER:
            payload['fitter_id'] = user.fitter_id
        else:
            self._check_fitter(payload.get('fitter_id'))

        customer = self.customers.create(payload, user_id=user.id)
        logger.info(f"Customer {customer.id} created by user {user.id}")
        return customer

    def update_customer(self, customer_id: int, data: CustomerUpdate, user: TokenUser) -> Optional[Customer]:
        """
        Raises:
            DomainError: nothing to update, null for a required field, unknown fitter
            ConflictError: stale version
        """
        if self.get_customer(customer_id, user) is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        expected_version = changes.pop('version', None)
        if not changes:
            raise DomainError("No fields to update")

        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise DomainError(f"{field} cannot be null")

        if 'fitter_id' in changes:
            if user.role == ROLE_FITTER:
                raise DomainError("Fitters cannot reassign customers")
            self._check_fitter(changes['fitter_id'])

        return self.customers.update(customer_id, changes, user_id=user.id, expected_version=expected_version)

    def assign_fitter(self, customer_id: int, fitter_id: int, user: TokenUser) -> Optional[Customer]:
        self._check_fitter(fitter_id)
        customer = self.customers.assign_fitter(customer_id, fitter_id, user_id=user.id)
        if customer:
            logger.info(f"Customer {customer_id} assigned to fitter {fitter_id}")
        return customer

    def remove_fitter(self, customer_id: int, user: TokenUser) -> Optional[Customer]:
        return self.customers.assign_fitter(customer_id, None, user_id=user.id)

    def change_status(self, customer_id: int, status: CustomerStatus, user: TokenUser) -> Optional[Customer]:
        customer = self.get_customer(customer_id, user)
        if customer is None:
            return None
        if customer.status == status:
            return customer
        logger.info(f"Customer {customer_id} status {customer.status.value} -> {status.value}")
        return self.customers.update(customer_id, {'status': status}, user_id=user.id)

    def deactivate(self, customer_id: int, user: TokenUser) -> Optional[Customer]:
        return self.change_status(customer_id, CustomerStatus.INACTIVE, user)

    def reactivate(self, customer_id: int, user: TokenUser) -> Optional[Customer]:
        return self.change_status(customer_id, CustomerStatus.ACTIVE, user)

    def validate_data_integrity(self, customer: Customer) -> Dict[str, Any]:
        """
        Check a stored customer for data problems

        Returns:
            {"customer_id", "valid": bool, "issues": [str, ...]}
        """
        issues: List[str] = []

        if not customer.name or not customer.name.strip():
            issues.append("Missing customer name")

        if customer.email:
            try:
                Email(customer.email)
            except ValueError:
                issues.append(f"Invalid email address: {customer.email}")

        if not (customer.email or customer.phone_no or customer.cell_no):
            issues.append("No contact information (email, phone or cell)")

        if customer.fitter_id is not None and self.fitters.find_by_id(customer.fitter_id) is None:
            issues.append(f"Assigned fitter {customer.fitter_id} does not exist or was deleted")

        return {
            "customer_id": customer.id,
            "valid": not issues,
            "issues": issues,
        }

    def bulk_create(self, rows: List[CustomerCreate], user: TokenUser) -> List[Customer]:
        """All-or-nothing import of several customers"""
        if not rows:
            raise DomainError("No customers to create")

        payloads = [row.model_dump() for row in rows]
        for payload in payloads:
            self._check_fitter(payload.get('fitter_id'))

        return self.customers.bulk_create(payloads, user_id=user.id)
