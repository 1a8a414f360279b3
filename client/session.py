"""Explicit per-app session store.

Holds what the app knows about the signed-in user: the bearer token, the
public user summary, the last fetched product list and the product the user
has selected.  The API client reads the token from here; the controller is
the only writer.
"""

from typing import List, Optional

from auth.schemas import UserSummary
from products.schemas import ProductResponse


class SessionStore:

    def __init__(self):
        self.token: Optional[str] = None
        self.user: Optional[UserSummary] = None
        self.products: List[ProductResponse] = []
        self.selected_product: Optional[ProductResponse] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == "admin"

    def sign_in(self, token: str, user: UserSummary) -> None:
        """Store a fresh login.  Replaces any previous token and drops stale data."""
        self.token = token
        self.user = user
        self.products = []
        self.selected_product = None

    def set_products(self, products: List[ProductResponse]) -> None:
        self.products = list(products)
        # Keep the selection pointing at the fresh copy, or drop it if it vanished
        if self.selected_product is not None:
            self.selected_product = self.find(self.selected_product.id)

    def find(self, product_id: int) -> Optional[ProductResponse]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def select(self, product: Optional[ProductResponse]) -> None:
        self.selected_product = product

    def clear(self) -> None:
        """Forget everything: used on logout and on a rejected token."""
        self.token = None
        self.user = None
        self.products = []
        self.selected_product = None
