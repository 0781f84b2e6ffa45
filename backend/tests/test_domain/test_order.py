"""
Unit tests for the Order and Customer domain models

Author: TM3
Date: 2025-10-17
"""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pydantic import ValidationError

from app.domain.customer import Customer, CustomerCreate
from app.domain.exceptions import DomainError, InvalidStatusTransition
from app.domain.order import Order
from app.domain.value_objects import OrderStatus, OrderPriority, CustomerStatus


def make_order(**overrides) -> Order:
    data = {
        'id': 1,
        'order_number': 'ORD-1-AAAAAA',
        'total_amount': Decimal('1000.00'),
        'deposit_paid': Decimal('0'),
        'balance_owing': Decimal('1000.00'),
    }
    data.update(overrides)
    return Order(**data)


class TestOrderStatusChanges:

    def test_valid_transition(self):
        order = make_order()
        order.change_status(OrderStatus.CONFIRMED)
        assert order.status == OrderStatus.CONFIRMED

    def test_invalid_transition_names_both_statuses(self):
        order = make_order()
        with pytest.raises(InvalidStatusTransition, match="Invalid status transition from pending to shipped"):
            order.change_status(OrderStatus.SHIPPED)
        assert order.status == OrderStatus.PENDING

    def test_delivery_sets_actual_delivery_date(self):
        delivered_at = datetime(2025, 5, 1, tzinfo=timezone.utc)
        order = make_order(status=OrderStatus.SHIPPED)
        order.change_status(OrderStatus.DELIVERED, now=delivered_at)
        assert order.actual_delivery_date == delivered_at

    def test_invalid_transition_is_a_domain_error(self):
        order = make_order(status=OrderStatus.CANCELLED)
        with pytest.raises(DomainError):
            order.change_status(OrderStatus.PENDING)


class TestOrderCancel:

    def test_cancel_appends_reason(self):
        order = make_order(special_instructions="Black stitching")
        order.cancel("  Customer changed mind ")
        assert order.status == OrderStatus.CANCELLED
        assert order.special_instructions == "Black stitching\nCancellation reason: Customer changed mind"

    def test_cancel_without_instructions(self):
        order = make_order()
        order.cancel("Duplicate")
        assert order.special_instructions == "Cancellation reason: Duplicate"

    def test_cancel_requires_reason(self):
        with pytest.raises(DomainError, match="reason"):
            make_order().cancel("   ")

    def test_cannot_cancel_after_shipping(self):
        order = make_order(status=OrderStatus.SHIPPED)
        with pytest.raises(DomainError):
            order.cancel("Too late")
        assert order.status == OrderStatus.SHIPPED


class TestOrderPayments:

    def test_record_deposit_updates_balance(self):
        order = make_order()
        order.record_deposit(Decimal('250.00'))
        order.record_deposit(Decimal('50'))
        assert order.deposit_paid == Decimal('300.00')
        assert order.balance_owing == Decimal('700.00')

    def test_deposit_cannot_exceed_total(self):
        order = make_order(deposit_paid=Decimal('900'))
        with pytest.raises(DomainError, match="exceed"):
            order.record_deposit(Decimal('200'))
        assert order.deposit_paid == Decimal('900')

    @pytest.mark.parametrize("amount", [Decimal('0'), Decimal('-5')])
    def test_deposit_must_be_positive(self, amount):
        with pytest.raises(DomainError):
            make_order().record_deposit(amount)

    def test_payment_percentage_and_requires_deposit(self):
        order = make_order(deposit_paid=Decimal('250'))
        assert order.payment_percentage == 25.0
        assert order.requires_deposit is True

        order.record_deposit(Decimal('50'))
        assert order.payment_percentage == 30.0
        assert order.requires_deposit is False

    def test_zero_total_needs_no_deposit(self):
        order = make_order(total_amount=Decimal('0'), balance_owing=Decimal('0'))
        assert order.payment_percentage == 0.0
        assert order.requires_deposit is False


class TestOrderDelivery:

    def test_overdue_when_estimate_passed(self):
        order = make_order(estimated_delivery_date=datetime.now(timezone.utc) - timedelta(days=2))
        assert order.is_overdue is True
        assert order.days_until_delivery <= -1

    def test_final_orders_are_never_overdue(self):
        order = make_order(
            status=OrderStatus.DELIVERED,
            estimated_delivery_date=datetime.now(timezone.utc) - timedelta(days=2),
        )
        assert order.is_overdue is False
        assert order.days_until_delivery is None

    def test_cancelled_order_has_no_days_left(self):
        order = make_order(
            status=OrderStatus.CANCELLED,
            estimated_delivery_date=datetime.now(timezone.utc) + timedelta(days=5),
        )
        assert order.days_until_delivery is None

    def test_days_until_delivery_rounds_up(self):
        order = make_order(estimated_delivery_date=datetime.now(timezone.utc) + timedelta(days=2, hours=1))
        assert order.days_until_delivery == 3

    def test_no_estimate(self):
        order = make_order()
        assert order.is_overdue is False
        assert order.days_until_delivery is None

    def test_estimate_must_be_in_the_future(self):
        with pytest.raises(DomainError):
            make_order().update_estimated_delivery(datetime.now(timezone.utc) - timedelta(hours=1))


class TestOrderEdits:

    def test_update_priority_sets_urgent_flag(self):
        order = make_order()
        order.update_priority(OrderPriority.CRITICAL)
        assert order.is_urgent is True
        order.update_priority(OrderPriority.LOW)
        assert order.is_urgent is False

    def test_final_orders_cannot_be_edited(self):
        order = make_order(status=OrderStatus.CANCELLED)
        with pytest.raises(DomainError):
            order.update_priority(OrderPriority.HIGH)
        with pytest.raises(DomainError):
            order.assign_fitter(3)
        with pytest.raises(DomainError):
            order.update_measurements({'withers': 30})

    @pytest.mark.parametrize("bad_id", [0, -4])
    def test_assign_factory_requires_positive_id(self, bad_id):
        with pytest.raises(DomainError):
            make_order().assign_factory(bad_id)

    def test_to_dict_includes_computed_fields(self):
        data = make_order(deposit_paid=Decimal('100'), priority=OrderPriority.URGENT).to_dict()
        assert data['total_amount'] == 1000.0
        assert data['payment_percentage'] == 10.0
        assert data['requires_deposit'] is True
        assert data['priority_color'] == OrderPriority.URGENT.color
        assert data['possible_transitions'] == ['confirmed', 'cancelled']

    def test_empty_seat_sizes_read_as_none(self):
        assert make_order(seat_sizes=[]).seat_sizes is None


class TestCustomer:

    def make_customer(self, **overrides) -> Customer:
        data = {'id': 1, 'name': 'Jane Rider'}
        data.update(overrides)
        return Customer(**data)

    def test_display_name_and_location(self):
        customer = self.make_customer(email='jane@example.com', city='Utrecht', country='Netherlands')
        assert customer.display_name == 'Jane Rider (jane@example.com)'
        assert customer.location == 'Utrecht, Netherlands'
        assert self.make_customer().location == 'No location'

    def test_is_active(self):
        assert self.make_customer().is_active
        assert not self.make_customer(status=CustomerStatus.SUSPENDED).is_active
        assert not self.make_customer(deleted_at=datetime.now(timezone.utc)).is_active

    def test_validate_for_order(self):
        self.make_customer().validate_for_order()
        with pytest.raises(DomainError, match="inactive"):
            self.make_customer(status=CustomerStatus.INACTIVE).validate_for_order()
        with pytest.raises(DomainError, match="deleted"):
            self.make_customer(deleted_at=datetime.now(timezone.utc)).validate_for_order()

    def test_create_normalizes_input(self):
        payload = CustomerCreate(name='  Jane  ', email='Jane@Example.com')
        assert payload.name == 'Jane'
        assert payload.email == 'jane@example.com'

    def test_create_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            CustomerCreate(name='Jane', email='not-an-email')

    def test_create_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            CustomerCreate(name='   ')
