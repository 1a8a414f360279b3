"""Pydantic request / response models for the product endpoints."""

import json
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

# JSON keys are camelCase on the wire (productCode, lastUpdate, ...);
# snake_case is accepted on input too.
_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}

VALID_STATUSES = ("Active", "Inactive")
ProductStatus = Literal["Active", "Inactive"]


class StoreAvailability(BaseModel):
    location: str
    available: bool = False


# -- Requests --------------------------------------------------------------
# One model serves both POST and PUT: an update is a full replace, so every
# optional field the client leaves out is written back as null (stock as 0,
# status as Active, availability as an empty list).


class ProductWrite(BaseModel):
    name: str = Field(max_length=255)
    description: Optional[str] = None
    price: float = Field(gt=0, allow_inf_nan=False)
    stock: Optional[int] = Field(default=0, ge=0)
    category: Optional[str] = Field(default=None, max_length=128)
    brand: Optional[str] = Field(default=None, max_length=128)
    location: Optional[str] = Field(default=None, max_length=255)
    sizes: Optional[str] = Field(default=None, max_length=255)
    product_code: Optional[str] = Field(default=None, max_length=64)
    order_name: Optional[str] = Field(default=None, max_length=255)
    image: Optional[str] = None
    status: ProductStatus = "Active"
    store_availability: List[StoreAvailability] = Field(default_factory=list)

    model_config = _CAMEL

    @field_validator("name")
    @classmethod
    def _name_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator(
        "description", "category", "brand", "location", "sizes",
        "product_code", "order_name", "image",
    )
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("stock", mode="before")
    @classmethod
    def _stock_default(cls, v):
        return 0 if v is None or v == "" else v

    @field_validator("status", mode="before")
    @classmethod
    def _status_default(cls, v):
        return "Active" if v in (None, "") else v

    @field_validator("store_availability", mode="before")
    @classmethod
    def _decode_availability(cls, v):
        # Older clients send the list JSON-encoded as a string
        if v is None or v == "":
            return []
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                raise ValueError("storeAvailability must be a JSON list")
        return v


# -- Responses -------------------------------------------------------------


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int = 0
    category: Optional[str] = None
    brand: Optional[str] = None
    location: Optional[str] = None
    sizes: Optional[str] = None
    product_code: Optional[str] = None
    order_name: Optional[str] = None
    image: Optional[str] = None
    status: ProductStatus = "Active"
    store_availability: List[StoreAvailability] = Field(default_factory=list)
    last_update: Optional[datetime] = None

    model_config = {**_CAMEL, "from_attributes": True}


class ProductCreated(BaseModel):
    id: int
