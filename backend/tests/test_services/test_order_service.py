"""
Unit tests for OrderService and CustomerService

Repositories are replaced with mocks; no database is needed.

Author: TM3
Date: 2025-10-17
"""
import re
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from app.core.auth import TokenUser, ROLE_USER
from app.domain.business_partner import Fitter
from app.domain.customer import Customer, CustomerCreate, CustomerUpdate
from app.domain.exceptions import DomainError, InvalidStatusTransition
from app.domain.order import Order, OrderCreate, OrderUpdate
from app.domain.value_objects import CustomerStatus, OrderPriority, OrderStatus
from app.services.customer_service import CustomerService, customer_visible_to
from app.services.order_service import (
    OrderService,
    cents_to_amount,
    generate_order_number,
    is_visible_to,
    scope_filters,
)


def make_order(**overrides) -> Order:
    data = {
        'id': 100,
        'order_number': 'ORD-1-AAAAAA',
        'fitter_id': 7,
        'factory_id': 3,
        'total_amount': Decimal('1000'),
        'deposit_paid': Decimal('0'),
        'balance_owing': Decimal('1000'),
        'version': 2,
    }
    data.update(overrides)
    return Order(**data)


@pytest.fixture
def order_repo():
    repo = MagicMock()
    repo.create.side_effect = lambda payload, user_id=None: Order(id=1, **{
        k: v for k, v in payload.items() if k in Order.model_fields
    })
    repo.save.side_effect = lambda order, user_id=None, expected_version=None: order
    return repo


@pytest.fixture
def customer_repo():
    repo = MagicMock()
    repo.find_by_id.return_value = Customer(id=1, name='Jane Rider', fitter_id=7)
    return repo


@pytest.fixture
def service(order_repo, customer_repo):
    return OrderService(order_repository=order_repo, customer_repository=customer_repo)


class TestHelpers:

    def test_order_number_format(self):
        assert re.fullmatch(r"ORD-\d{13}-[A-Z0-9]{6}", generate_order_number())

    def test_order_numbers_differ(self):
        assert generate_order_number() != generate_order_number()

    def test_cents_to_amount(self):
        assert cents_to_amount(123456) == Decimal('1234.56')
        assert cents_to_amount(None) == Decimal('0.00')

    def test_scope_filters(self, admin_user, fitter_user, factory_user):
        assert scope_filters(admin_user) == {"fitter_id": None, "factory_id": None}
        assert scope_filters(fitter_user) == {"fitter_id": 7, "factory_id": None}
        assert scope_filters(factory_user) == {"fitter_id": None, "factory_id": 3}

    def test_unlinked_fitter_sees_nothing(self):
        user = TokenUser(id=5, email='x@example.com', role='fitter')
        assert scope_filters(user)["fitter_id"] == 0

    def test_is_visible_to(self, admin_user, fitter_user, factory_user):
        order = make_order(fitter_id=8, factory_id=3)
        assert is_visible_to(order, admin_user)
        assert not is_visible_to(order, fitter_user)
        assert is_visible_to(order, factory_user)


class TestCreateOrder:

    def test_cent_prices_and_customer_defaults(self, service, order_repo, admin_user):
        # Act
        service.create_order(OrderCreate(customer_id=1, price_saddle=350000, price_deposit=50000), admin_user)

        # Assert
        payload = order_repo.create.call_args[0][0]
        assert payload['total_amount'] == Decimal('3500.00')
        assert payload['deposit_paid'] == Decimal('500.00')
        assert payload['balance_owing'] == Decimal('3000.00')
        assert payload['customer_name'] == 'Jane Rider'
        assert payload['fitter_id'] == 7
        assert payload['status'] == OrderStatus.PENDING
        assert payload['order_number'].startswith('ORD-')
        assert order_repo.create.call_args[1]['user_id'] == admin_user.id

    def test_rushed_orders_are_urgent(self, service, order_repo, admin_user):
        service.create_order(OrderCreate(rushed=True, priority=OrderPriority.LOW), admin_user)

        payload = order_repo.create.call_args[0][0]
        assert payload['priority'] == OrderPriority.URGENT
        assert payload['is_urgent'] is True

    def test_fitter_orders_for_themselves(self, service, order_repo, fitter_user):
        service.create_order(OrderCreate(fitter_id=99), fitter_user)
        assert order_repo.create.call_args[0][0]['fitter_id'] == 7

    def test_seat_sizes_from_instructions(self, service, order_repo, admin_user):
        service.create_order(OrderCreate(special_instructions="Seat size 17.5, long flaps"), admin_user)
        assert order_repo.create.call_args[0][0]['seat_sizes'] == ['17,5']

    def test_given_seat_sizes_win(self, service, order_repo, admin_user):
        service.create_order(
            OrderCreate(seat_sizes=['18', '18.0', '17.5'], special_instructions="seat size 16"), admin_user
        )
        assert order_repo.create.call_args[0][0]['seat_sizes'] == ['18', '18,0', '17,5']

    def test_deposit_above_total(self, service, order_repo, admin_user):
        with pytest.raises(DomainError, match="exceed"):
            service.create_order(OrderCreate(price_saddle=1000, price_deposit=2000), admin_user)
        order_repo.create.assert_not_called()

    def test_unknown_customer(self, service, customer_repo, admin_user):
        customer_repo.find_by_id.return_value = None
        with pytest.raises(DomainError, match="Customer 5 not found"):
            service.create_order(OrderCreate(customer_id=5), admin_user)

    def test_inactive_customer(self, service, customer_repo, admin_user):
        customer_repo.find_by_id.return_value = Customer(id=1, name='Jane', status=CustomerStatus.SUSPENDED)
        with pytest.raises(DomainError):
            service.create_order(OrderCreate(customer_id=1), admin_user)

    def test_past_delivery_date(self, service, admin_user):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        with pytest.raises(DomainError, match="future"):
            service.create_order(OrderCreate(estimated_delivery_date=past), admin_user)


class TestOrderWorkflow:

    def test_change_status_saves_with_version(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()

        saved = service.change_status(100, OrderStatus.CONFIRMED, admin_user, expected_version=2)

        assert saved.status == OrderStatus.CONFIRMED
        order_repo.save.assert_called_once()
        assert order_repo.save.call_args[1]['expected_version'] == 2

    def test_invalid_transition_is_not_saved(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()

        with pytest.raises(InvalidStatusTransition):
            service.change_status(100, OrderStatus.DELIVERED, admin_user)
        order_repo.save.assert_not_called()

    def test_hidden_order_reads_as_missing(self, service, order_repo, fitter_user):
        order_repo.find_by_id.return_value = make_order(fitter_id=8)
        assert service.change_status(100, OrderStatus.CONFIRMED, fitter_user) is None
        assert service.get_order(100, fitter_user) is None

    def test_cancel(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()

        saved = service.cancel_order(100, "Horse sold", admin_user)

        assert saved.status == OrderStatus.CANCELLED
        assert "Cancellation reason: Horse sold" in saved.special_instructions
        assert order_repo.save.call_args[1]['expected_version'] == 2

    def test_record_deposit(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()

        saved = service.record_deposit(100, Decimal('400'), admin_user)

        assert saved.deposit_paid == Decimal('400')
        assert saved.balance_owing == Decimal('600')
        assert order_repo.save.call_args[1]['expected_version'] == 2

    def test_status_change_without_version_locks_on_read_version(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()

        service.change_status(100, OrderStatus.CONFIRMED, admin_user)

        assert order_repo.save.call_args[1]['expected_version'] == 2

    def test_update_order(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()

        saved = service.update_order(
            100, OrderUpdate(priority=OrderPriority.CRITICAL, special_instructions="Rush", version=2), admin_user
        )

        assert saved.is_urgent is True
        assert saved.special_instructions == "Rush"
        assert order_repo.save.call_args[1]['expected_version'] == 2

    def test_update_without_fields(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()
        with pytest.raises(DomainError, match="No fields to update"):
            service.update_order(100, OrderUpdate(version=2), admin_user)

    def test_update_final_order(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order(status=OrderStatus.DELIVERED)
        with pytest.raises(DomainError):
            service.update_order(100, OrderUpdate(factory_id=4), admin_user)

    def test_delete(self, service, order_repo, admin_user):
        order_repo.find_by_id.return_value = make_order()
        order_repo.soft_delete.return_value = True

        assert service.delete_order(100, admin_user) is True
        order_repo.soft_delete.assert_called_once_with(100, user_id=admin_user.id)


class TestCustomerService:

    @pytest.fixture
    def customers(self, sample_customer_row):
        repo = MagicMock()
        repo.find_by_id.return_value = Customer.model_validate(sample_customer_row)
        return repo

    @pytest.fixture
    def fitters(self):
        repo = MagicMock()
        repo.find_by_id.return_value = Fitter(id=7)
        return repo

    def test_fitter_creates_own_customers(self, customers, fitters, fitter_user):
        CustomerService(customers, fitters).create_customer(CustomerCreate(name='Bob', fitter_id=2), fitter_user)
        assert customers.create.call_args[0][0]['fitter_id'] == 7

    def test_admin_cannot_assign_unknown_fitter(self, customers, fitters, admin_user):
        fitters.find_by_id.return_value = None
        with pytest.raises(DomainError, match="Fitter 9 not found"):
            CustomerService(customers, fitters).assign_fitter(1, 9, admin_user)

    def test_fitter_cannot_reassign(self, customers, fitters, fitter_user):
        with pytest.raises(DomainError):
            CustomerService(customers, fitters).update_customer(1, CustomerUpdate(fitter_id=8), fitter_user)

    def test_update_passes_version(self, customers, fitters, admin_user):
        CustomerService(customers, fitters).update_customer(1, CustomerUpdate(city='Gouda', version=1), admin_user)
        customers.update.assert_called_once_with(1, {'city': 'Gouda'}, user_id=1, expected_version=1)

    def test_update_rejects_null_for_required_fields(self, customers, fitters, admin_user):
        service = CustomerService(customers, fitters)

        with pytest.raises(DomainError, match="name cannot be null"):
            service.update_customer(1, CustomerUpdate(name=None, status=None), admin_user)
        with pytest.raises(DomainError, match="status cannot be null"):
            service.update_customer(1, CustomerUpdate(status=None), admin_user)
        customers.update.assert_not_called()

    def test_other_fitters_customer_is_hidden(self, customers, fitters):
        other = TokenUser(id=11, email='f@example.com', role='fitter', fitter_id=8)
        assert CustomerService(customers, fitters).get_customer(1, other) is None
        assert not customer_visible_to(customers.find_by_id.return_value, other)

    def test_status_change_is_skipped_when_unchanged(self, customers, fitters, admin_user):
        CustomerService(customers, fitters).change_status(1, CustomerStatus.ACTIVE, admin_user)
        customers.update.assert_not_called()

    def test_deactivate(self, customers, fitters, admin_user):
        CustomerService(customers, fitters).deactivate(1, admin_user)
        customers.update.assert_called_once_with(1, {'status': CustomerStatus.INACTIVE}, user_id=1)

    def test_integrity_report(self, customers, fitters):
        fitters.find_by_id.return_value = None
        customer = Customer(id=3, name='Bob', email='bad@@example', fitter_id=4)

        report = CustomerService(customers, fitters).validate_data_integrity(customer)

        assert report['customer_id'] == 3
        assert report['valid'] is False
        assert any("Invalid email" in issue for issue in report['issues'])
        assert any("fitter 4" in issue for issue in report['issues'])

    def test_integrity_ok(self, customers, fitters, sample_customer_row):
        report = CustomerService(customers, fitters).validate_data_integrity(
            Customer.model_validate(sample_customer_row)
        )
        assert report == {"customer_id": 1, "valid": True, "issues": []}

    def test_bulk_create_requires_rows(self, customers, fitters, admin_user):
        with pytest.raises(DomainError):
            CustomerService(customers, fitters).bulk_create([], admin_user)

    def test_plain_user_sees_customer(self, customers, fitters):
        user = TokenUser(id=30, email='u@example.com', role=ROLE_USER)
        assert CustomerService(customers, fitters).get_customer(1, user) is not None
