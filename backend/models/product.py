"""Product ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Column, Index, Integer, String, Text, Numeric, Enum, DateTime, JSON
from sqlalchemy.dialects import mysql

from database import Base

# MySQL DATETIME drops fractional seconds unless asked; list ordering relies on them
_Timestamp = DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # asdecimal=False: the API speaks floats, 9.99 in means 9.99 out
    price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    stock = Column(Integer, nullable=False, default=0, server_default="0")
    category = Column(String(128), nullable=True)
    brand = Column(String(128), nullable=True)
    location = Column(String(255), nullable=True)
    sizes = Column(String(255), nullable=True)
    product_code = Column(String(64), nullable=True)
    order_name = Column(String(255), nullable=True)
    # URL or data: URI
    image = Column(Text, nullable=True)
    status = Column(
        Enum("Active", "Inactive", name="product_status"),
        nullable=False,
        default="Active",
        server_default="Active",
    )
    # [{"location": "Hull, UK", "available": true}, ...]
    store_availability = Column(JSON, nullable=False, default=list)
    # Set by the handlers on every write (see products.router)
    last_update = Column(_Timestamp, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_products_category", "category"),
        Index("idx_products_last_update", "last_update"),
    )
