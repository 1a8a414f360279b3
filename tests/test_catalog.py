import pytest

from client import catalog
from products.schemas import ProductResponse


def _p(id, name, price=1.0, stock=0, category=None, status="Active", **extra):
    return ProductResponse(id=id, name=name, price=price, stock=stock, category=category, status=status, **extra)


PRODUCTS = [
    _p(1, "Blue Jeans", 40, 3, "Jeans", brand="Levis"),
    _p(2, "Wool Coat", 120, 12, "Coats", product_code="CT-9"),
    _p(3, "Slim Jeans", 45, 0, "jeans", status="Inactive"),
    _p(4, "Mystery Box", 5, 20, description="Surprise inside"),
]


def test_filter_matches_any_text_field():
    assert [p.id for p in catalog.filter_products(PRODUCTS, "JEANS")] == [1, 3]
    assert [p.id for p in catalog.filter_products(PRODUCTS, "levis")] == [1]
    assert [p.id for p in catalog.filter_products(PRODUCTS, "ct-9")] == [2]
    assert [p.id for p in catalog.filter_products(PRODUCTS, "surprise")] == [4]
    assert catalog.filter_products(PRODUCTS, "   ") == PRODUCTS


def test_sort_products():
    assert [p.id for p in catalog.sort_products(PRODUCTS, "name")] == [1, 4, 3, 2]
    assert [p.id for p in catalog.sort_products(PRODUCTS, "price")] == [4, 1, 3, 2]
    assert [p.id for p in catalog.sort_products(PRODUCTS, "stock")] == [3, 1, 2, 4]
    with pytest.raises(ValueError):
        catalog.sort_products(PRODUCTS, "colour")


def test_product_stats():
    stats = catalog.product_stats(PRODUCTS)
    assert stats == catalog.ProductStats(
        total_products=4,
        active_products=3,
        low_stock_products=2,
        out_of_stock_products=1,
        categories=3,
        total_value=40 * 3 + 120 * 12 + 5 * 20,
    )
    assert catalog.product_stats([]) == catalog.ProductStats()


def test_top_categories_and_category_browsing():
    top = catalog.top_categories(PRODUCTS + [_p(5, "Denim Jacket", category="Jeans")], limit=1)
    assert top == [catalog.CategorySummary(name="Jeans", count=2, icon="👖")]

    assert [p.id for p in catalog.products_in_category(PRODUCTS, "JEANS")] == [1, 3]


def test_display_helpers():
    assert catalog.format_price(9.99) == "$9.99"
    assert catalog.format_price(1234.5) == "$1,234.50"
    assert catalog.stock_text(0) == "Out of stock"
    assert catalog.stock_text(4) == "Low stock"
    assert catalog.stock_text(10) == "10 in stock"
    assert catalog.category_icon("Watches") == "⌚"
    assert catalog.category_icon("gizmos") == "📦"
    assert catalog.truncate("abcdefghij", 8) == "abcde..."
    assert catalog.truncate("short", 8) == "short"
