# backend/repositories/products.py
"""Data access for products.

Every operation opens its own deadline-bound call through the gateway and
hands back detached ``ProductRecord`` objects; nothing is kept between calls.
"""
import logging
from contextlib import contextmanager
from decimal import InvalidOperation
from typing import Iterator, List, Optional

from sqlalchemy import Numeric, cast, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from database import Gateway, LOOKUP_TIMEOUT, QUERY_TIMEOUT, SessionLocal
from models.product import Product
from repositories.errors import DataAccessError, InvalidProductError, MissingProductIdError
from schemas.product import ProductRecord, ProductReportFilter, to_fixed_point
from utils.query_filters import build_contains_predicate

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10

_PRICE_TYPE = Numeric(13, 2)


def _column_values(product: ProductRecord) -> dict:
    # Every column except the store-assigned ID
    return {
        Product.manufacturer: product.manufacturer,
        Product.sku: product.sku,
        Product.upc: product.upc,
        Product.price_per_unit: cast(to_fixed_point(product.price_per_unit), _PRICE_TYPE),
        Product.quantity_on_hand: product.quantity_on_hand,
        Product.product_name: product.product_name,
    }


@contextmanager
def _data_access(operation: str) -> Iterator[None]:
    # Values the driver or the price column cannot represent count as store errors too
    try:
        yield
    except (SQLAlchemyError, InvalidOperation, OverflowError) as e:
        logger.exception("Product %s failed: %s", operation, e)
        raise DataAccessError(f"product {operation} failed") from e


class ProductRepository:

    def __init__(self, gateway: Gateway):
        self._gateway = gateway

    def get_by_id(self, product_id: int) -> Optional[ProductRecord]:
        """Return the product, or None when no row has this ID."""
        with _data_access("lookup"), self._gateway.session(LOOKUP_TIMEOUT) as db:
            product = db.get(Product, product_id)
            if product is None:
                return None
            return ProductRecord.model_validate(product)

    def delete(self, product_id: int) -> None:
        with _data_access("delete"), self._gateway.session(QUERY_TIMEOUT) as db:
            db.execute(
                delete(Product)
                .where(Product.product_id == product_id)
                .execution_options(synchronize_session=False)
            )

    def list_all(self) -> List[ProductRecord]:
        with _data_access("list"), self._gateway.session(QUERY_TIMEOUT) as db:
            rows = db.scalars(select(Product).order_by(Product.product_id)).all()
            return [ProductRecord.model_validate(p) for p in rows]

    def top_n(self, limit: int = DEFAULT_TOP_N) -> List[ProductRecord]:
        """Best-stocked products first; equal stock falls back to ID order."""
        query = (
            select(Product)
            .order_by(Product.quantity_on_hand.desc(), Product.product_id.asc())
            .limit(limit)
        )
        with _data_access("top-n"), self._gateway.session(QUERY_TIMEOUT) as db:
            return [ProductRecord.model_validate(p) for p in db.scalars(query).all()]

    def update(self, product: ProductRecord) -> None:
        if not product.product_id:
            raise InvalidProductError("product has invalid ID")

        with _data_access("update"), self._gateway.session(QUERY_TIMEOUT) as db:
            result = db.execute(
                update(Product)
                .where(Product.product_id == product.product_id)
                .values(_column_values(product))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                logger.debug("Update matched no product with id=%s", product.product_id)

    def insert(self, product: ProductRecord) -> int:
        """Insert everything but the ID and return the ID the store assigned."""
        with _data_access("insert"), self._gateway.session(QUERY_TIMEOUT) as db:
            stmt = insert(Product).values(_column_values(product)).returning(Product.product_id)
            new_id = db.execute(stmt).scalar_one_or_none()

        if not new_id:
            raise MissingProductIdError("store returned no product ID")
        return new_id

    def search_filtered(self, report_filter: ProductReportFilter) -> List[ProductRecord]:
        """Substring search; text columns come back lower-cased for display."""
        predicate = build_contains_predicate([
            (Product.product_name, report_filter.name_filter),
            (Product.manufacturer, report_filter.manufacturer_filter),
            (Product.sku, report_filter.sku_filter),
        ])
        query = (
            select(
                Product.product_id.label("product_id"),
                func.lower(Product.manufacturer).label("manufacturer"),
                func.lower(Product.sku).label("sku"),
                Product.upc.label("upc"),
                Product.price_per_unit.label("price_per_unit"),
                Product.quantity_on_hand.label("quantity_on_hand"),
                func.lower(Product.product_name).label("product_name"),
            )
            .where(predicate)
            .order_by(Product.product_id)
        )
        with _data_access("search"), self._gateway.session(QUERY_TIMEOUT) as db:
            rows = db.execute(query).all()
            return [ProductRecord.model_validate(dict(row._mapping)) for row in rows]


def get_product_repository() -> ProductRepository:
    return ProductRepository(Gateway(SessionLocal))
