# backend/schemas/product.py
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# Widest values the products table holds: Integer columns and NUMERIC(13, 2)
MIN_INT = -(2**31)
MAX_INT = 2**31 - 1
MAX_PRICE = Decimal("99999999999.99")

_CENTS = Decimal("0.01")


def to_fixed_point(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


# Base configuration: ORM compatibility and camelCase wire names
class ORMBase(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Shared attributes; missing JSON fields fall back to zero values
class ProductBase(ORMBase):
    manufacturer: str = ""
    sku: str = ""
    upc: str = ""
    price_per_unit: Decimal = Field(default=Decimal("0"), ge=-MAX_PRICE, le=MAX_PRICE)
    quantity_on_hand: int = Field(default=0, ge=MIN_INT, le=MAX_INT)
    product_name: str = ""

    # Prices are kept in whole cents, the same way the store keeps them
    @field_validator("price_per_unit")
    @classmethod
    def _round_to_cents(cls, value: Decimal) -> Decimal:
        return to_fixed_point(value)

    @field_serializer("price_per_unit", when_used="json")
    def _price_as_number(self, value: Decimal) -> float:
        return float(value)


# Full product representation; product_id 0 means "not persisted yet"
class ProductRecord(ProductBase):
    product_id: int = Field(default=0, ge=MIN_INT, le=MAX_INT)


class ProductCreated(ORMBase):
    product_id: int


class ProductReportFilter(ORMBase):
    """Substring filters for the product report. Empty means unconstrained."""
    name_filter: str = Field(default="", alias="productName")
    manufacturer_filter: str = Field(default="", alias="manufacturer")
    sku_filter: str = Field(default="", alias="sku")


# Push channel messages
class ProductEvent(ORMBase):
    event: Literal["created", "updated", "deleted"]
    product_id: int
    product: Optional[ProductRecord] = None


class TopProductsSnapshot(ORMBase):
    event: Literal["topProducts"] = "topProducts"
    products: List[ProductRecord]
