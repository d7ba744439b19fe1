"""SQLAlchemy model for product roots, the parent of a family of variants."""

from sqlalchemy import Column, Index, Integer, String, text

from dairycart.db.base import Base
from dairycart.db.models._mixins import ProductFieldsMixin, TimestampMixin


class ProductRoot(ProductFieldsMixin, TimestampMixin, Base):
    __tablename__ = "product_roots"

    id = Column(Integer, primary_key=True)
    sku_prefix = Column(String(50), nullable=False)

    # prefixes of archived roots may be reused
    __table_args__ = (
        Index(
            "ix_product_roots_sku_prefix_live",
            "sku_prefix",
            unique=True,
            postgresql_where=text("archived_on IS NULL"),
            sqlite_where=text("archived_on IS NULL"),
        ),
    )
