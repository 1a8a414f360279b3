from datetime import timedelta

import pytest
import requests

from conftest import ADMIN_PASSWORD, USER_PASSWORD, create_user
from client.api import ApiClient
from client.controller import BrowseView, EditMode, InventoryController, ScreenState
from client.session import SessionStore
from client.validation import ProductForm
from core.security import create_access_token


@pytest.fixture
def app_controller(http):
    session = SessionStore()
    return InventoryController(ApiClient("http://testserver", session, http=http), session)


@pytest.fixture
def admin_controller(app_controller):
    create_user("admin", ADMIN_PASSWORD, role="admin")
    assert app_controller.login("admin", ADMIN_PASSWORD) is not None
    return app_controller


def _add(ctrl, **fields):
    assert ctrl.open_add()
    return ctrl.save(ProductForm(**fields))


def test_login_moves_to_dashboard_with_products(app_controller, admin_headers, client):
    client.post("/products", json={"name": "Widget", "price": 9.99}, headers=admin_headers)
    create_user("alice", USER_PASSWORD)

    user = app_controller.login("alice", USER_PASSWORD)

    assert user.username == "alice"
    assert app_controller.state is ScreenState.BROWSING
    assert app_controller.view is BrowseView.DASHBOARD
    assert app_controller.session.is_authenticated
    assert [p.name for p in app_controller.session.products] == ["Widget"]
    assert app_controller.error is None
    assert app_controller.loading is False


def test_failed_login_stays_logged_out(app_controller):
    create_user("alice", USER_PASSWORD)

    assert app_controller.login("alice", "wrong-password") is None

    assert app_controller.state is ScreenState.LOGGED_OUT
    assert app_controller.error == "Invalid username or password"
    assert app_controller.session.token is None


def test_login_validation_skips_network(app_controller, asgi_adapter):
    assert app_controller.login("   ", "pw") is None
    assert app_controller.error == "Username is required"
    assert asgi_adapter.sent == []


def test_register_then_login(app_controller):
    user_id = app_controller.register("bob", "secret1", "bob@example.com")
    assert user_id
    assert app_controller.state is ScreenState.LOGGED_OUT
    assert app_controller.notice == "Registration successful! Please login."

    assert app_controller.register("bob", "secret1") is None
    assert app_controller.error == "Username already exists"

    assert app_controller.login("bob", "secret1") is not None
    assert app_controller.state is ScreenState.BROWSING


def test_short_password_rejected_locally(app_controller, asgi_adapter):
    assert app_controller.register("bob", "123") is None
    assert "at least 6" in app_controller.error
    assert asgi_adapter.sent == []


def test_admin_add_product(admin_controller):
    product_id = _add(admin_controller, name="Widget", price="9.99")

    assert product_id
    assert admin_controller.state is ScreenState.BROWSING
    assert admin_controller.view is BrowseView.PRODUCTS
    assert admin_controller.notice == "Product added successfully!"
    widget = admin_controller.session.find(product_id)
    assert widget.price == 9.99
    assert widget.stock == 0


def test_invalid_form_never_reaches_server(admin_controller, asgi_adapter):
    assert admin_controller.open_add()
    sent_before = len(asgi_adapter.sent)

    for form, message in [
        (ProductForm(name="", price="9.99"), "Name is required"),
        (ProductForm(name="Widget", price=""), "Price is required"),
        (ProductForm(name="Widget", price="0"), "Price must be a valid positive number"),
        (ProductForm(name="Widget", price="abc"), "Price must be a valid positive number"),
        (ProductForm(name="Widget", price="1", stock="-2"), "Stock must be a valid non-negative number"),
    ]:
        assert admin_controller.save(form) is None
        assert admin_controller.error == message
        assert admin_controller.state is ScreenState.EDITING

    assert len(asgi_adapter.sent) == sent_before


def test_edit_is_full_replace(admin_controller):
    product_id = _add(admin_controller, name="Widget", price="9.99", category="Tools")
    product = admin_controller.session.find(product_id)

    assert admin_controller.open_edit(product)
    assert admin_controller.edit_mode is EditMode.EDIT
    assert admin_controller.form.category == "Tools"

    updated = admin_controller.save(ProductForm(name="Widget", price="12"))

    assert updated.price == 12
    assert updated.category is None
    assert admin_controller.session.find(product_id).category is None


def test_save_after_product_vanished_mid_edit(admin_controller):
    product_id = _add(admin_controller, name="Widget", price="9.99")
    assert admin_controller.open_edit(admin_controller.session.find(product_id))

    # Removed elsewhere while the form is open; the refresh drops the selection
    admin_controller.api.delete_product(product_id)
    admin_controller.refresh_products()
    assert admin_controller.session.selected_product is None

    assert admin_controller.save(ProductForm(name="Widget", price="12")) is None

    assert admin_controller.error == "Product not found"
    assert admin_controller.state is ScreenState.EDITING
    assert admin_controller.loading is False


def test_cancel_edit_returns_to_browsing(admin_controller):
    assert admin_controller.open_add()
    admin_controller.cancel_edit()
    assert admin_controller.state is ScreenState.BROWSING
    assert admin_controller.edit_mode is None


def test_non_admin_cannot_open_editor(app_controller):
    create_user("alice", USER_PASSWORD)
    app_controller.login("alice", USER_PASSWORD)

    assert app_controller.open_add() is False
    assert app_controller.error == "Only admins can add products."
    assert app_controller.state is ScreenState.BROWSING
    assert app_controller.delete_product(1) is None


def test_delete_product(admin_controller):
    product_id = _add(admin_controller, name="Widget", price="1")

    assert admin_controller.delete_product(product_id) is True
    assert admin_controller.session.products == []

    assert admin_controller.delete_product(product_id) is None
    assert admin_controller.error == "Product not found"
    assert admin_controller.state is ScreenState.BROWSING


def test_expired_token_forces_logout(admin_controller):
    _add(admin_controller, name="Widget", price="1")
    user = admin_controller.session.user
    admin_controller.session.token = create_access_token(
        {"sub": user.username, "user_id": user.id, "username": user.username, "role": user.role},
        expires_delta=timedelta(seconds=-1),
    )

    assert admin_controller.refresh_products() is None

    assert admin_controller.state is ScreenState.LOGGED_OUT
    assert admin_controller.session.token is None
    assert admin_controller.session.products == []
    assert admin_controller.error == "Token has expired"


def test_unauthorized_while_editing_forces_logout(admin_controller):
    assert admin_controller.open_add()
    admin_controller.session.token = "garbage"

    assert admin_controller.save(ProductForm(name="Widget", price="1")) is None

    assert admin_controller.state is ScreenState.LOGGED_OUT
    assert admin_controller.form is None


def test_action_while_loading_is_noop(admin_controller, asgi_adapter):
    sent_before = len(asgi_adapter.sent)
    assert admin_controller.open_add()

    admin_controller.loading = True
    assert admin_controller.save(ProductForm(name="Widget", price="1")) is None
    assert admin_controller.refresh_products() is None
    assert admin_controller.state is ScreenState.EDITING
    assert len(asgi_adapter.sent) == sent_before


def test_timeout_restores_state_without_retry():
    class _SlowHTTP:
        calls = 0

        def request(self, **kwargs):
            _SlowHTTP.calls += 1
            raise requests.ReadTimeout()

    session = SessionStore()
    ctrl = InventoryController(ApiClient("http://testserver", session, http=_SlowHTTP()), session)

    assert ctrl.login("alice", USER_PASSWORD) is None

    assert _SlowHTTP.calls == 1
    assert ctrl.state is ScreenState.LOGGED_OUT
    assert ctrl.loading is False
    assert "timed out" in ctrl.error


def test_logout_clears_session(admin_controller):
    _add(admin_controller, name="Widget", price="1")
    admin_controller.logout()

    assert admin_controller.state is ScreenState.LOGGED_OUT
    assert admin_controller.session.token is None
    assert admin_controller.session.user is None
    assert admin_controller.session.products == []


def test_navigation_and_local_views(admin_controller):
    _add(admin_controller, name="Blue Jeans", price="40", stock="3", category="Jeans")
    _add(admin_controller, name="Red Shirt", price="20", stock="0", category="Shirts")

    assert [p.name for p in admin_controller.search("jeans")] == ["Blue Jeans"]

    product = admin_controller.session.products[0]
    assert admin_controller.navigate(BrowseView.PRODUCT_DETAIL, product)
    assert admin_controller.session.selected_product == product
    assert admin_controller.search_query == ""

    stats = admin_controller.stats()
    assert stats.total_products == 2
    assert stats.out_of_stock_products == 1
    assert stats.total_value == 120.0

    assert {c.name for c in admin_controller.categories()} == {"Jeans", "Shirts"}


def test_padded_short_password_rejected_before_sending(app_controller, asgi_adapter):
    assert app_controller.register("bob", "  abc  ") is None
    assert "at least 6" in app_controller.error
    assert asgi_adapter.sent == []
