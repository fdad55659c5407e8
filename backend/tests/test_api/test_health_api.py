"""
API tests for the root, health and /me endpoints
"""
from unittest.mock import patch, MagicMock


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "online"


@patch('marketdesk.main.get_db_connection_with_retry')
def test_health_with_database(mock_connect, client):
    mock_connect.return_value = MagicMock()

    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["service"] == "marketdesk-api"
    assert body["database"]["status"] == "connected"
    assert body["database"]["error"] is None
    mock_connect.assert_called_once_with(max_retries=1, retry_delay=0.5)


@patch('marketdesk.main.get_db_connection_with_retry')
def test_health_without_database(mock_connect, client):
    mock_connect.side_effect = Exception("could not connect to server")

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "degraded"
    assert body["database"] == {
        "status": "disconnected",
        "latency_ms": None,
        "error": "could not connect to server",
    }


def test_me_for_shop_owner(client, login, shop_owner):
    login(shop_owner)

    data = client.get("/api/v1/me").json()["data"]

    assert data["id"] == "owner-uuid"
    assert data["role"] == "shop_owner"
    assert data["is_super_admin"] is False
    assert data["accessible_shop_ids"] == [1, 2]


def test_me_for_super_admin(client, login, super_admin):
    login(super_admin)

    data = client.get("/api/v1/me").json()["data"]

    assert data["is_super_admin"] is True
    assert data["accessible_shop_ids"] is None


def test_me_requires_token(client):
    assert client.get("/api/v1/me").status_code == 401
