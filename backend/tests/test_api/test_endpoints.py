"""
API tests over the full FastAPI app

Repositories and services are patched where the routers look them up,
so these run without a database.

Author: TM3
Date: 2025-10-17
"""
from unittest.mock import patch, MagicMock

from app.domain.comment import Comment
from app.domain.customer import Customer
from app.domain.exceptions import ConflictError, DomainError, InvalidStatusTransition
from app.domain.order import Order
from app.services.auth_service import AuthenticationError


class TestRootAndHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "online"

    @patch('app.main.get_db_connection_with_retry')
    def test_health_connected(self, mock_get_conn, client):
        mock_get_conn.return_value = MagicMock()

        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["service"] == "saddle-order-api"
        assert data["database"]["status"] == "connected"
        assert data["database"]["error"] is None

    @patch('app.main.get_db_connection_with_retry')
    def test_health_degraded(self, mock_get_conn, client):
        mock_get_conn.side_effect = Exception("connection refused")

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["database"]["status"] == "disconnected"
        assert "connection refused" in data["database"]["error"]

    def test_security_headers(self, client):
        response = client.get("/api/v1/orders/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"


class TestAuthorization:

    def test_missing_token(self, client):
        response = client.get("/api/v1/customers/")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/orders/", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_fitter_cannot_manage_fitters(self, client, fitter_headers):
        response = client.get("/api/v1/fitters/", headers=fitter_headers)

        assert response.status_code == 403
        assert "your role: fitter" in response.json()["detail"]

    @patch('app.api.fitters.FitterRepository')
    def test_supervisor_passes_admin_guard(self, mock_repo, client, supervisor_headers):
        mock_repo.return_value.find_all.return_value = ([], 0)

        response = client.get("/api/v1/fitters/", headers=supervisor_headers)

        assert response.status_code == 200
        assert response.json()["hydra:totalItems"] == 0

    def test_factory_cannot_see_catalog(self, client, factory_headers):
        assert client.get("/api/v1/presets/", headers=factory_headers).status_code == 403


class TestAuthEndpoints:

    @patch('app.api.auth.AuthService')
    def test_login_failure_returns_field_errors(self, mock_service, client):
        mock_service.return_value.login.side_effect = AuthenticationError({"password": "incorrectPassword"})

        response = client.post("/api/v1/auth/login", json={"email": "tom", "password": "nope"})

        assert response.status_code == 422
        assert response.json() == {"errors": {"password": "incorrectPassword"}}

    def test_login_requires_both_fields(self, client):
        assert client.post("/api/v1/auth/login", json={"email": "tom"}).status_code == 422

    @patch('app.api.auth.AuthService')
    def test_me_falls_back_to_token(self, mock_service, client, fitter_headers):
        mock_service.return_value.get_user.return_value = None

        data = client.get("/api/v1/auth/me", headers=fitter_headers).json()["data"]

        assert data["id"] == 10
        assert data["role"] == "fitter"
        assert data["fitter_id"] == 7


class TestOrderEndpoints:

    @patch('app.api.orders.OrderRepository')
    def test_list_is_scoped_for_fitters(self, mock_repo, client, fitter_headers, sample_order_row):
        # Arrange
        mock_repo.return_value.find_all.return_value = ([Order.model_validate(sample_order_row)], 1)

        # Act
        response = client.get("/api/v1/orders/?fitter_id=99", headers=fitter_headers)

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["data"][0]["order_number"] == 'ORD-1736500000000-ABC123'
        assert body["data"][0]["total_amount"] == 3000.0
        assert mock_repo.return_value.find_all.call_args[1]["fitter_id"] == 7

    @patch('app.api.orders.OrderService')
    def test_create(self, mock_service, client, admin_headers, sample_order_row):
        mock_service.return_value.create_order.return_value = Order.model_validate(sample_order_row)

        response = client.post(
            "/api/v1/orders/",
            json={"customer_id": 1, "price_saddle": 300000, "price_deposit": 50000},
            headers=admin_headers
        )

        assert response.status_code == 201
        assert response.json()["data"]["id"] == 100

    @patch('app.api.orders.OrderService')
    def test_create_rejects_bad_deposit(self, mock_service, client, admin_headers):
        mock_service.return_value.create_order.side_effect = DomainError("Deposit 20.00 cannot exceed order total 10.00")

        response = client.post(
            "/api/v1/orders/", json={"price_saddle": 1000, "price_deposit": 2000}, headers=admin_headers
        )

        assert response.status_code == 400
        assert "exceed" in response.json()["detail"]

    def test_factory_cannot_create(self, client, factory_headers):
        assert client.post("/api/v1/orders/", json={}, headers=factory_headers).status_code == 403

    @patch('app.api.orders.OrderService')
    def test_get_missing(self, mock_service, client, admin_headers):
        mock_service.return_value.get_order.return_value = None

        response = client.get("/api/v1/orders/555", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Order 555 not found"

    @patch('app.api.orders.OrderService')
    def test_status_change_conflict(self, mock_service, client, admin_headers):
        mock_service.return_value.change_status.side_effect = ConflictError(
            "Order 100 was modified by someone else (expected version 2, current 3)"
        )

        response = client.patch(
            "/api/v1/orders/100/status", json={"status": "confirmed", "version": 2}, headers=admin_headers
        )

        assert response.status_code == 409
        assert "expected version 2" in response.json()["detail"]

    @patch('app.api.orders.OrderService')
    def test_invalid_transition(self, mock_service, client, admin_headers):
        mock_service.return_value.change_status.side_effect = InvalidStatusTransition("pending", "delivered")

        response = client.patch("/api/v1/orders/100/status", json={"status": "delivered"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status transition from pending to delivered"

    def test_unknown_status_is_a_validation_error(self, client, admin_headers):
        response = client.patch("/api/v1/orders/100/status", json={"status": "lost"}, headers=admin_headers)
        assert response.status_code == 422

    def test_fitter_cannot_list_other_fitters_orders(self, client, fitter_headers):
        assert client.get("/api/v1/orders/fitter/8", headers=fitter_headers).status_code == 403

    def test_factory_cannot_list_other_factories_orders(self, client, factory_headers):
        assert client.get("/api/v1/orders/factory/4", headers=factory_headers).status_code == 403

    @patch('app.api.orders.OrderRepository')
    def test_number_lookup_hides_other_fitters_orders(self, mock_repo, client, fitter_headers, sample_order_row):
        mock_repo.return_value.find_by_number.return_value = Order.model_validate(dict(sample_order_row, fitter_id=8))

        response = client.get("/api/v1/orders/number/ORD-1736500000000-ABC123", headers=fitter_headers)

        assert response.status_code == 404

    @patch('app.api.orders.OrderRepository')
    def test_requiring_deposit_is_scoped_for_fitters(self, mock_repo, client, fitter_headers):
        mock_repo.return_value.find_requiring_deposit.return_value = []

        response = client.get("/api/v1/orders/requiring-deposit", headers=fitter_headers)

        assert response.status_code == 200
        mock_repo.return_value.find_requiring_deposit.assert_called_once_with(fitter_id=7, factory_id=None)

    @patch('app.api.orders.OrderRepository')
    def test_customer_summary_is_scoped_for_factories(self, mock_repo, client, factory_headers):
        mock_repo.return_value.get_customer_summary.return_value = {
            'customer_id': 1, 'order_count': 2, 'total_value': 6000.0
        }

        response = client.get("/api/v1/orders/customer/1/summary", headers=factory_headers)

        assert response.status_code == 200
        assert response.json()["data"]["order_count"] == 2
        mock_repo.return_value.get_customer_summary.assert_called_once_with(1, fitter_id=None, factory_id=3)

    @patch('app.api.orders.OrderRepository')
    def test_plain_user_sees_requiring_deposit(self, mock_repo, client, user_headers):
        mock_repo.return_value.find_requiring_deposit.return_value = []
        assert client.get("/api/v1/orders/requiring-deposit", headers=user_headers).status_code == 200

    @patch('app.api.orders.OrderService')
    def test_delete(self, mock_service, client, admin_headers):
        mock_service.return_value.delete_order.return_value = True

        response = client.delete("/api/v1/orders/100", headers=admin_headers)

        assert response.status_code == 204
        assert response.content == b""


class TestCustomerEndpoints:

    @patch('app.api.customers.CustomerService')
    def test_update_without_fields(self, mock_service, client, admin_headers):
        mock_service.return_value.update_customer.side_effect = DomainError("No fields to update")

        response = client.patch("/api/v1/customers/1", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "No fields to update"

    @patch('app.services.customer_service.FitterRepository')
    @patch('app.services.customer_service.CustomerRepository')
    def test_update_with_null_name_is_a_bad_request(self, mock_repo, mock_fitters, client, admin_headers,
                                                    sample_customer_row):
        mock_repo.return_value.find_by_id.return_value = Customer.model_validate(sample_customer_row)

        response = client.patch("/api/v1/customers/1", json={"name": None, "status": None}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "name cannot be null"
        mock_repo.return_value.update.assert_not_called()

    @patch('app.api.customers.CustomerService')
    def test_get(self, mock_service, client, fitter_headers, sample_customer_row):
        mock_service.return_value.get_customer.return_value = Customer.model_validate(sample_customer_row)

        data = client.get("/api/v1/customers/1", headers=fitter_headers).json()["data"]

        assert data["display_name"] == "Jane Rider (jane@example.com)"
        assert data["location"] == "Utrecht, Netherlands"

    def test_plain_user_cannot_edit_customers(self, client, user_headers):
        assert client.get("/api/v1/customers/1", headers=user_headers).status_code == 403

    def test_fitter_cannot_list_unassigned_customers(self, client, fitter_headers):
        assert client.get("/api/v1/customers/without-fitter", headers=fitter_headers).status_code == 403

    @patch('app.api.customers.CustomerRepository')
    def test_supervisor_lists_unassigned_customers(self, mock_repo, client, supervisor_headers):
        mock_repo.return_value.find_without_fitter.return_value = []

        response = client.get("/api/v1/customers/without-fitter", headers=supervisor_headers)

        assert response.status_code == 200
        mock_repo.return_value.find_without_fitter.assert_called_once_with()


class TestCatalogEndpoints:

    @patch('app.api.presets.PresetRepository')
    def test_duplicate_preset_name(self, mock_repo, client, admin_headers):
        mock_repo.return_value.name_exists.return_value = True

        response = client.post("/api/v1/presets/", json={"name": "Jumping"}, headers=admin_headers)

        assert response.status_code == 409
        mock_repo.return_value.create.assert_not_called()

    @patch('app.api.brands.BrandRepository')
    def test_brand_delete_is_permanent(self, mock_repo, client, admin_headers):
        mock_repo.return_value.hard_delete.return_value = True

        response = client.delete("/api/v1/brands/3", headers=admin_headers)

        assert response.status_code == 204
        mock_repo.return_value.hard_delete.assert_called_once_with(3)

    @patch('app.api.brands.BrandRepository')
    def test_brand_delete_missing(self, mock_repo, client, admin_headers):
        mock_repo.return_value.hard_delete.return_value = False
        assert client.delete("/api/v1/brands/3", headers=admin_headers).status_code == 404


class TestCommentEndpoints:

    @patch('app.api.comments.CommentRepository')
    @patch('app.api.comments.OrderService')
    def test_non_staff_cannot_post_internal(self, mock_service, mock_repo, client, fitter_headers):
        mock_service.return_value.get_order.return_value = MagicMock()

        response = client.post(
            "/api/v1/comments/",
            json={"order_id": 100, "content": "Check tree width", "is_internal": True},
            headers=fitter_headers
        )

        assert response.status_code == 403
        mock_repo.return_value.create.assert_not_called()

    @patch('app.api.comments.CommentRepository')
    def test_internal_type_forces_internal_flag(self, mock_repo, client, admin_headers):
        mock_repo.return_value.create.return_value = Comment(
            id=1, order_id=100, user_id=1, content="Leather delayed", type="internal", is_internal=True
        )

        response = client.post(
            "/api/v1/comments/",
            json={"order_id": 100, "content": "Leather delayed", "type": "internal"},
            headers=admin_headers
        )

        assert response.status_code == 201
        payload = mock_repo.return_value.create.call_args[0][0]
        assert payload["is_internal"] is True
        assert payload["user_id"] == 1

    @patch('app.api.comments.CommentRepository')
    @patch('app.api.comments.OrderService')
    def test_comments_on_hidden_order(self, mock_service, mock_repo, client, fitter_headers):
        mock_service.return_value.get_order.return_value = None

        response = client.get("/api/v1/comments/order/100", headers=fitter_headers)

        assert response.status_code == 404
        mock_repo.return_value.find_by_order.assert_not_called()

    @patch('app.api.comments.CommentRepository')
    def test_listing_without_order_shows_own_public_comments(self, mock_repo, client, user_headers):
        mock_repo.return_value.find_all.return_value = ([], 0)

        client.get("/api/v1/comments/?is_internal=true", headers=user_headers)

        kwargs = mock_repo.return_value.find_all.call_args[1]
        assert kwargs["user_id"] == 30
        assert kwargs["is_internal"] is False
