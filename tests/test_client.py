# tests/test_client.py
import pytest

from sdk.client import ApiError, AuthSession, StoreClient
from sdk.storage import LocalStorage


@pytest.fixture
def store_client(client):
    return StoreClient(base_url="http://testserver", session=client)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "local" / "storage.json")


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("STORE_API_URL", "http://shop.example:8080/")
    assert StoreClient().base_url == "http://shop.example:8080"
    assert StoreClient(base_url="http://other").base_url == "http://other"


def test_catalog_calls(store_client, image_file):
    cat = store_client.create_category("Shoes")
    product = store_client.create_product("Sneaker", 49.99, cat["id"], image_path=image_file)
    assert product["price"] == 49.99
    assert store_client.image_url(product) == f"http://testserver{product['imageUrl']}"
    assert store_client.list_products() == [product]
    assert store_client.list_categories() == [cat]

    store_client.delete_product(product["id"])
    assert store_client.list_products() == []
    store_client.delete_category(cat["id"])
    assert store_client.list_categories() == []


def test_errors_become_api_error(store_client):
    with pytest.raises(ApiError) as exc:
        store_client.delete_product(12345)
    assert exc.value.status_code == 404
    assert exc.value.message == "Product not found"


def test_auth_session_login_logout(store_client, storage):
    auth = AuthSession(store_client, storage)
    user = auth.register("Bob", "bob@example.com", "hunter2")
    assert user["email"] == "bob@example.com"

    auth.logout()
    assert auth.user is None

    user = auth.login("bob@example.com", "hunter2")
    assert auth.logged_in
    assert user["name"] == "Bob"
    assert storage.get_item("token") == store_client.token
    assert store_client.me()["id"] == user["id"]

    auth.logout()
    assert auth.user is None
    assert storage.get_item("token") is None
    assert store_client.token is None


def test_auth_session_bad_password_keeps_state(store_client, storage):
    auth = AuthSession(store_client, storage)
    auth.register("Bob", "bob@example.com", "hunter2")
    auth.logout()
    with pytest.raises(ApiError) as exc:
        auth.login("bob@example.com", "wrong")
    assert exc.value.status_code == 401
    assert auth.user is None
    assert storage.get_item("token") is None


def test_restore_from_stored_token(store_client, storage):
    first = AuthSession(store_client, storage)
    first.register("Bob", "bob@example.com", "hunter2")
    first.login("bob@example.com", "hunter2")

    fresh_client = StoreClient(base_url=store_client.base_url, session=store_client.session)
    second = AuthSession(fresh_client, storage)
    assert second.restore()["email"] == "bob@example.com"

    storage.set_item("token", "stale.token")
    third = AuthSession(StoreClient(base_url=store_client.base_url, session=store_client.session), storage)
    assert third.restore() is None
    assert storage.get_item("token") is None
