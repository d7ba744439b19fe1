"""SQLAlchemy model for purchasable product variants."""

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, String, text

from dairycart.db.base import Base
from dairycart.db.models._mixins import ProductFieldsMixin, TimestampMixin


class Product(ProductFieldsMixin, TimestampMixin, Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    product_root_id = Column(
        Integer, ForeignKey("product_roots.id"), nullable=False, index=True
    )
    sku = Column(String(255), nullable=False)
    option_summary = Column(String(1024), nullable=False, default="")
    upc = Column(String(64), nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0)
    on_sale = Column(Boolean, nullable=False, default=False)
    sale_price = Column(Float, nullable=False, default=0)

    __table_args__ = (
        Index(
            "ix_products_sku_live",
            "sku",
            unique=True,
            postgresql_where=text("archived_on IS NULL"),
            sqlite_where=text("archived_on IS NULL"),
        ),
    )
