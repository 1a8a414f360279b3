"""
Screen-state machine for the inventory app.

States
------
``LOGGED_OUT`` → ``AUTHENTICATING`` → ``BROWSING`` ⇄ ``EDITING``

``loading`` and ``error`` are overlays on whichever state is active.  Every
action that talks to the server runs to completion before the next one is
accepted: while ``loading`` is set, actions return ``None`` without doing
anything.  A failed action leaves ``error`` set and puts the machine back
in the state it started from, except that an ``UnauthorizedError`` from any
call always ends in ``LOGGED_OUT`` with the session cleared.
"""

from enum import Enum
from typing import Callable, List, Optional

from products.schemas import ProductResponse
from client import catalog
from client.api import ApiClient, logger as _api_logger
from client.errors import InventoryClientError, UnauthorizedError
from client.session import SessionStore
from client.validation import (
    ProductForm,
    form_from_product,
    validate_login,
    validate_product_form,
    validate_registration,
)

logger = _api_logger.getChild("controller")


class ScreenState(str, Enum):
    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    BROWSING = "browsing"
    EDITING = "editing"


class BrowseView(str, Enum):
    DASHBOARD = "dashboard"
    PRODUCTS = "products"
    PRODUCT_DETAIL = "product_detail"
    CATEGORIES = "categories"


class EditMode(str, Enum):
    ADD = "add"
    EDIT = "edit"


class InventoryController:
    """Drives the app: owns the screen state, writes the session store."""

    def __init__(self, api: ApiClient, session: SessionStore):
        self.api = api
        self.session = session
        self.state = ScreenState.LOGGED_OUT
        self.view = BrowseView.DASHBOARD
        self.edit_mode: Optional[EditMode] = None
        # Id of the product being edited; the selection can vanish on refresh
        self.editing_id: Optional[int] = None
        self.form: Optional[ProductForm] = None
        self.loading = False
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self.search_query = ""

    # -- plumbing --------------------------------------------------------------

    def _run(self, name: str, action: Callable):
        """
        Run *action* under the loading guard.

        Returns the action's result, or ``None`` if it was skipped (already
        loading) or failed.
        """
        if self.loading:
            logger.debug("Ignoring %s: another action is in flight", name)
            return None

        prior = self.state
        self.loading = True
        self.error = None
        self.notice = None
        try:
            return action()
        except UnauthorizedError as exc:
            logger.info("%s rejected as unauthorized; signing out", name)
            self._reset_to_logged_out()
            self.error = str(exc)
        except InventoryClientError as exc:
            logger.info("%s failed: %s", name, exc)
            self.state = prior
            self.error = str(exc)
        finally:
            self.loading = False
        return None

    def _reset_to_logged_out(self) -> None:
        self.session.clear()
        self.state = ScreenState.LOGGED_OUT
        self.view = BrowseView.DASHBOARD
        self.edit_mode = None
        self.editing_id = None
        self.form = None
        self.search_query = ""

    def _load_products(self) -> List[ProductResponse]:
        products = self.api.list_products()
        self.session.set_products(products)
        return products

    def _reload_after_write(self) -> None:
        """Refresh the list after a successful write; a failure here is not the write's failure."""
        try:
            self._load_products()
        except UnauthorizedError:
            raise
        except InventoryClientError as exc:
            self.error = f"Failed to load products: {exc}"

    def _require_admin(self, message: str) -> bool:
        if self.session.is_admin:
            return True
        self.error = message
        return False

    # -- auth ------------------------------------------------------------------

    def login(self, username: str, password: str):
        """LOGGED_OUT → AUTHENTICATING → BROWSING (dashboard).  Returns the user."""
        if self.state is not ScreenState.LOGGED_OUT:
            return None

        def action():
            validate_login(username, password)
            self.state = ScreenState.AUTHENTICATING
            self.api.ping()
            token, user = self.api.login(username.strip(), password.strip())
            self.session.sign_in(token, user)
            self.state = ScreenState.BROWSING
            self.view = BrowseView.DASHBOARD
            self._reload_after_write()
            self.notice = "Login successful!"
            return user

        return self._run("login", action)

    def register(self, username: str, password: str, email: Optional[str] = None):
        """Create an account.  Stays LOGGED_OUT; the user logs in next.  Returns the new id."""
        if self.state is not ScreenState.LOGGED_OUT:
            return None

        def action():
            validate_registration(username, password, email)
            self.api.ping()
            user_id = self.api.register(
                username.strip(),
                password.strip(),
                email.strip() if email and email.strip() else None,
            )
            self.notice = "Registration successful! Please login."
            return user_id

        return self._run("register", action)

    def logout(self) -> None:
        """Any state → LOGGED_OUT.  Always allowed, even mid-load."""
        self._reset_to_logged_out()
        self.error = None
        self.notice = None

    # -- browsing --------------------------------------------------------------

    def refresh_products(self):
        if not self.session.is_authenticated:
            self.error = "Please log in to view products"
            return None
        return self._run("refresh_products", self._load_products)

    def navigate(self, view: BrowseView, product: Optional[ProductResponse] = None) -> bool:
        """Switch the browse view.  Leaving EDITING this way discards the form."""
        if self.state not in (ScreenState.BROWSING, ScreenState.EDITING) or self.loading:
            return False
        if product is not None:
            self.session.select(product)
        self.state = ScreenState.BROWSING
        self.view = view
        self.edit_mode = None
        self.editing_id = None
        self.form = None
        self.error = None
        self.search_query = ""
        return True

    def search(self, query: str) -> List[ProductResponse]:
        self.search_query = query
        return self.visible_products()

    def visible_products(self) -> List[ProductResponse]:
        return catalog.filter_products(self.session.products, self.search_query)

    def stats(self) -> catalog.ProductStats:
        return catalog.product_stats(self.session.products)

    def categories(self, limit: int = 6) -> List[catalog.CategorySummary]:
        return catalog.top_categories(self.session.products, limit)

    # -- editing ---------------------------------------------------------------

    def open_add(self) -> bool:
        """BROWSING → EDITING with an empty form (admin only)."""
        if self.state is not ScreenState.BROWSING or self.loading:
            return False
        if not self._require_admin("Only admins can add products."):
            return False
        self.state = ScreenState.EDITING
        self.edit_mode = EditMode.ADD
        self.editing_id = None
        self.form = ProductForm()
        self.error = None
        return True

    def open_edit(self, product: Optional[ProductResponse] = None) -> bool:
        """BROWSING → EDITING with the form pre-filled (admin only)."""
        if self.state is not ScreenState.BROWSING or self.loading:
            return False
        product = product or self.session.selected_product
        if product is None:
            return False
        if not self._require_admin("Only admins can edit products."):
            return False
        self.session.select(product)
        self.state = ScreenState.EDITING
        self.edit_mode = EditMode.EDIT
        self.editing_id = product.id
        self.form = form_from_product(product)
        self.error = None
        return True

    def cancel_edit(self) -> None:
        if self.state is ScreenState.EDITING and not self.loading:
            self.state = ScreenState.BROWSING
            self.edit_mode = None
            self.editing_id = None
            self.form = None
            self.error = None

    def save(self, form: Optional[ProductForm] = None):
        """
        Submit the add/edit form.  On success returns the new id (add) or the
        updated product (edit) and goes back to the product list.
        """
        if self.state is not ScreenState.EDITING:
            return None
        form = form or self.form

        def action():
            payload = validate_product_form(form)
            if self.edit_mode is EditMode.ADD:
                result = self.api.create_product(payload)
                notice = "Product added successfully!"
            else:
                result = self.api.update_product(self.editing_id, payload)
                notice = "Product updated successfully!"
            self.state = ScreenState.BROWSING
            self.view = BrowseView.PRODUCTS
            self.edit_mode = None
            self.editing_id = None
            self.form = None
            self.session.select(None)
            self._reload_after_write()
            self.notice = notice
            return result

        return self._run("save", action)

    def delete_product(self, product_id: int):
        """Delete a product (admin only).  Returns True on success."""
        if self.state is not ScreenState.BROWSING:
            return None
        if not self.loading and not self._require_admin("Only admins can delete products."):
            return None

        def action():
            self.api.delete_product(product_id)
            self.session.select(None)
            self.view = BrowseView.PRODUCTS
            self._reload_after_write()
            self.notice = "Product deleted successfully!"
            return True

        return self._run("delete_product", action)
