"""
Client-side form checks.

These run before any network call so an obviously bad form fails fast with
a friendly message.  The server repeats every check and has the final word.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError as _PydanticError

from auth.schemas import EMAIL_RE, MIN_PASSWORD_LENGTH
from products.schemas import ProductResponse, ProductWrite, StoreAvailability
from client.errors import ValidationError


@dataclass
class ProductForm:
    """Raw text as typed into the add/edit form."""

    name: str = ""
    description: str = ""
    price: str = ""
    stock: str = ""
    category: str = ""
    location: str = ""
    image: str = ""
    status: str = "Active"
    brand: str = ""
    sizes: str = ""
    product_code: str = ""
    order_name: str = ""
    store_availability: List[StoreAvailability] = field(default_factory=list)


def form_from_product(product: ProductResponse) -> ProductForm:
    """Pre-fill the edit form from an existing product."""
    return ProductForm(
        name=product.name or "",
        description=product.description or "",
        price=f"{product.price:g}" if product.price is not None else "",
        stock=str(product.stock) if product.stock is not None else "",
        category=product.category or "",
        location=product.location or "",
        image=product.image or "",
        status=product.status,
        brand=product.brand or "",
        sizes=product.sizes or "",
        product_code=product.product_code or "",
        order_name=product.order_name or "",
        store_availability=list(product.store_availability),
    )


def _parse_price(text: str) -> float:
    if not text or not text.strip():
        raise ValidationError("Price is required")
    try:
        price = float(text)
    except ValueError:
        raise ValidationError("Price must be a valid positive number")
    # NaN fails every comparison, so test for the valid range rather than <= 0
    if not price > 0 or price == float("inf"):
        raise ValidationError("Price must be a valid positive number")
    return price


def _parse_stock(text: str) -> int:
    if not text or not text.strip():
        return 0
    try:
        stock = int(text.strip())
    except ValueError:
        raise ValidationError("Stock must be a valid non-negative number")
    if stock < 0:
        raise ValidationError("Stock must be a valid non-negative number")
    return stock


def validate_product_form(form: ProductForm) -> ProductWrite:
    """
    Check the form and convert it to the request body.

    Raises ``client.errors.ValidationError`` with the first problem found.
    """
    if not form.name or not form.name.strip():
        raise ValidationError("Name is required")
    price = _parse_price(form.price)
    stock = _parse_stock(form.stock)

    try:
        return ProductWrite(
            name=form.name,
            description=form.description,
            price=price,
            stock=stock,
            category=form.category,
            brand=form.brand,
            location=form.location,
            sizes=form.sizes,
            product_code=form.product_code,
            order_name=form.order_name,
            image=form.image,
            status=form.status or "Active",
            store_availability=form.store_availability,
        )
    except _PydanticError as exc:
        first = exc.errors()[0]
        raise ValidationError(first.get("msg", "Invalid product")) from exc


def validate_login(username: str, password: str) -> None:
    if not username or not username.strip():
        raise ValidationError("Username is required")
    if not password or not password.strip():
        raise ValidationError("Password is required")


def validate_registration(username: str, password: str, email: Optional[str] = None) -> None:
    validate_login(username, password)
    # The controller sends the stripped password, so measure that
    if len(password.strip()) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if email and email.strip() and not EMAIL_RE.match(email.strip()):
        raise ValidationError("Please enter a valid email address")
