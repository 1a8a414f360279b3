"""
Views computed locally from the fetched product list: search, sorting,
dashboard statistics, category browsing, and display formatting.

The server never filters; every function here works on the full list held
in the session store.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List

from products.schemas import ProductResponse

LOW_STOCK_THRESHOLD = 10

SORT_KEYS = ("name", "price", "stock", "category")

_CATEGORY_ICONS = {
    "bottoms": "👖",
    "coats": "🧥",
    "jeans": "👖",
    "tops": "👕",
    "shirts": "👔",
    "accessories": "👜",
    "shoes": "👟",
    "electronics": "📱",
    "home": "🏠",
    "books": "📚",
    "sports": "⚽",
    "toys": "🧸",
    "beauty": "💄",
    "food": "🍎",
    "clothing": "👗",
    "jewelry": "💍",
    "bags": "👜",
    "watches": "⌚",
}
_DEFAULT_ICON = "📦"


@dataclass
class ProductStats:
    total_products: int = 0
    active_products: int = 0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    categories: int = 0
    total_value: float = 0.0


@dataclass
class CategorySummary:
    name: str
    count: int
    icon: str


# -- search / sort -------------------------------------------------------------


def filter_products(products: Iterable[ProductResponse], query: str) -> List[ProductResponse]:
    """Case-insensitive substring match on name, category, brand, code and description."""
    products = list(products)
    if not query or not query.strip():
        return products

    needle = query.strip().lower()

    def matches(p: ProductResponse) -> bool:
        haystack = (p.name, p.category, p.brand, p.product_code, p.description)
        return any(needle in (field or "").lower() for field in haystack)

    return [p for p in products if matches(p)]


def sort_products(products: Iterable[ProductResponse], key: str = "name") -> List[ProductResponse]:
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {key!r}; expected one of {', '.join(SORT_KEYS)}")
    if key in ("name", "category"):
        return sorted(products, key=lambda p: (getattr(p, key) or "").lower())
    return sorted(products, key=lambda p: getattr(p, key) or 0)


def products_in_category(products: Iterable[ProductResponse], category: str) -> List[ProductResponse]:
    wanted = category.lower()
    return [p for p in products if (p.category or "").lower() == wanted]


# -- dashboard -----------------------------------------------------------------


def product_stats(products: Iterable[ProductResponse]) -> ProductStats:
    products = list(products)
    return ProductStats(
        total_products=len(products),
        active_products=sum(1 for p in products if p.status == "Active"),
        low_stock_products=sum(1 for p in products if (p.stock or 0) < LOW_STOCK_THRESHOLD),
        out_of_stock_products=sum(1 for p in products if (p.stock or 0) == 0),
        categories=len({p.category for p in products if p.category}),
        total_value=round(sum((p.price or 0) * (p.stock or 0) for p in products), 2),
    )


def top_categories(products: Iterable[ProductResponse], limit: int = 6) -> List[CategorySummary]:
    """Categories by product count, most populated first."""
    counts = Counter(p.category for p in products if p.category)
    return [
        CategorySummary(name=name, count=count, icon=category_icon(name))
        for name, count in counts.most_common(limit)
    ]


# -- formatting ----------------------------------------------------------------


def category_icon(category: str) -> str:
    return _CATEGORY_ICONS.get((category or "").lower(), _DEFAULT_ICON)


def format_price(price: float) -> str:
    return f"${price:,.2f}"


def stock_text(stock: int) -> str:
    if stock <= 0:
        return "Out of stock"
    if stock < LOW_STOCK_THRESHOLD:
        return "Low stock"
    return f"{stock} in stock"


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
