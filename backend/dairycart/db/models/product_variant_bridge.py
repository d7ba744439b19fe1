"""Links a product variant to the option values that produced it."""

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from dairycart.db.base import Base


class ProductVariantBridge(Base):
    __tablename__ = "product_variant_bridge"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_option_value_id = Column(
        Integer, ForeignKey("product_option_values.id"), nullable=False, index=True
    )
    created_on = Column(DateTime(timezone=True), server_default=func.now())
    archived_on = Column(DateTime(timezone=True))
