"""
API tests for /api/v1/orders

OrderService is mocked; orders are real domain objects built from the
order_row fixture so display formatting runs for real.
"""
import pytest
from unittest.mock import patch
from decimal import Decimal

from marketdesk.core.auth import UserContext
from marketdesk.domain.order import SelectedFeature
from marketdesk.domain.product import Product
from marketdesk.repositories.order_repository import OrderRepository
from marketdesk.services.order_service import OrderNotFoundError


@pytest.fixture
def order(order_row):
    features = {7: SelectedFeature(label="Size", value="XL", price_addition=Decimal("12.50"))}
    return OrderRepository._map_row_to_order(order_row, features)


@pytest.fixture
def service(order):
    with patch('marketdesk.api.orders.OrderService') as mock_service_class:
        mock_service = mock_service_class.return_value
        mock_service.get_order.return_value = order
        yield mock_service


class TestOrderList:

    def test_pages_filtered_rows(self, client, login, shop_owner, service):
        login(shop_owner)
        service.list_orders.return_value = [{"id": i} for i in range(5)]

        response = client.get("/api/v1/orders/?tab=completed&order_type=pickup&limit=2&offset=2")

        body = response.json()
        assert body["total"] == 5
        assert body["count"] == 2
        assert body["data"] == [{"id": 2}, {"id": 3}]
        service.list_orders.assert_called_once_with(
            accessible_shop_ids=[1, 2], from_date=None, to_date=None, shop_ids=None,
            tab="completed", search=None, order_type="pickup"
        )

    def test_shop_filter_is_forwarded(self, client, login, super_admin, service):
        login(super_admin)
        service.list_orders.return_value = []

        client.get("/api/v1/orders/?shop_ids=1&shop_ids=3")

        kwargs = service.list_orders.call_args.kwargs
        assert kwargs["shop_ids"] == [1, 3]
        assert kwargs["accessible_shop_ids"] is None


    @pytest.mark.parametrize("query", ["tab=shipped", "order_type=drone"])
    def test_unknown_filter_is_400(self, query, client, login, shop_owner, service):
        login(shop_owner)

        response = client.get(f"/api/v1/orders/?{query}")

        assert response.status_code == 400
        service.list_orders.assert_not_called()

    def test_archived_tab_is_accepted(self, client, login, shop_owner, service):
        login(shop_owner)
        service.list_orders.return_value = []

        assert client.get("/api/v1/orders/?tab=archived").status_code == 200


class TestOrderPreview:

    def test_preview(self, client, login, shop_owner, service):
        login(shop_owner)

        response = client.get("/api/v1/orders/10")

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["buyer"] == "Bea Buyer"
        assert data["delivery_type"] == "delivery"
        assert data["city"] == "Haifa"

    def test_missing_order(self, client, login, super_admin, service):
        login(super_admin)
        service.get_order.side_effect = OrderNotFoundError("Order 99 not found")

        response = client.get("/api/v1/orders/99")

        assert response.status_code == 404
        assert response.json()["detail"] == "Order 99 not found"

    def test_order_of_foreign_shop(self, client, login, service, order):
        login(UserContext(user_id="other", role_name="shop_owner", shop_ids=[3]))

        assert client.get("/api/v1/orders/10").status_code == 403


class TestOrderWorkflowApi:

    def test_confirm(self, client, login, shop_owner, service, order):
        login(shop_owner)
        service.confirm.return_value = order

        response = client.post("/api/v1/orders/10/confirm")

        assert response.status_code == 200
        service.confirm.assert_called_once_with(10, "owner-uuid")

    def test_invalid_status_is_400(self, client, login, shop_owner, service):
        login(shop_owner)
        service.update_status.side_effect = ValueError("Invalid status: lost")

        response = client.put("/api/v1/orders/10/status", json={"status": "lost"})

        assert response.status_code == 400

    def test_cancel_with_comment(self, client, login, shop_owner, service, order):
        login(shop_owner)
        service.cancel.return_value = order

        client.post("/api/v1/orders/10/cancel", json={"comment": "Out of stock"})

        service.cancel.assert_called_once_with(10, "owner-uuid", "Out of stock")

    def test_assign_driver(self, client, login, shop_owner, service, order):
        login(shop_owner)
        service.assign_driver.return_value = order

        response = client.post("/api/v1/orders/10/assign-driver", json={"driver_id": 7})

        assert response.status_code == 200
        service.assign_driver.assert_called_once_with(10, 7, "owner-uuid")

    def test_assign_driver_requires_driver(self, client, login, shop_owner, service):
        login(shop_owner)

        assert client.post("/api/v1/orders/10/assign-driver", json={}).status_code == 422

    def test_blank_comment_is_400(self, client, login, shop_owner, service):
        login(shop_owner)
        service.add_comment.side_effect = ValueError("Comment must not be empty")

        response = client.post("/api/v1/orders/10/comments", json={"comment": " "})

        assert response.status_code == 400

    def test_delete_missing_comment(self, client, login, shop_owner, service):
        login(shop_owner)
        service.delete_comment.side_effect = OrderNotFoundError("Comment 4 not found on order 10")

        assert client.delete("/api/v1/orders/10/comments/4").status_code == 404


class TestCreateOrder:

    @patch('marketdesk.api.orders.OrderRepository')
    @patch('marketdesk.api.orders.ProductRepository')
    def test_shop_comes_from_product(self, mock_products, mock_orders, client, login, shop_owner, service):
        login(shop_owner)
        mock_products.return_value.find_by_id.return_value = Product(id=5, title="Mug", shop=1)
        mock_orders.return_value.create.return_value = 10

        response = client.post("/api/v1/orders/", json={"product_id": 5, "shipping_method": "pickup"})

        assert response.status_code == 201
        fields = mock_orders.return_value.create.call_args[0][0]
        assert fields["shop"] == 1
        assert fields["status"] == "processing"
        service.get_order.assert_called_once_with(10)

    @patch('marketdesk.api.orders.ProductRepository')
    def test_unknown_product(self, mock_products, client, login, shop_owner, service):
        login(shop_owner)
        mock_products.return_value.find_by_id.return_value = None

        assert client.post("/api/v1/orders/", json={"product_id": 404}).status_code == 400
