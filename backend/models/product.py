# backend/models/product.py
from sqlalchemy import Column, Integer, String, Numeric
from database import Base

# Model Product
# A single inventory item. Column names keep the camelCase used by the
# existing products table and by API clients.
class Product(Base):
    __tablename__ = "products"

    product_id = Column("productId", Integer, primary_key=True, autoincrement=True, index=True)
    manufacturer = Column("manufacturer", String, nullable=False, default="")
    sku = Column("sku", String, nullable=False, default="")
    upc = Column("upc", String, nullable=False, default="")

    # Fixed-point, two fractional digits.
    price_per_unit = Column("pricePerUnit", Numeric(13, 2), nullable=False, default=0)

    quantity_on_hand = Column("quantityOnHand", Integer, nullable=False, default=0, index=True)
    product_name = Column("productName", String, nullable=False, default="")
