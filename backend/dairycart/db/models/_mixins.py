"""Column groups shared by product roots and product variants."""

from sqlalchemy import Boolean, Column, Float, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime


class ProductFieldsMixin:
    """Descriptive, pricing and dimension columns copied from a root to its variants."""

    name = Column(String(255), nullable=False)
    subtitle = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    manufacturer = Column(String(255), nullable=False, default="")
    brand = Column(String(255), nullable=False, default="")
    taxable = Column(Boolean, nullable=False, default=False)
    cost = Column(Float, nullable=False, default=0)
    product_weight = Column(Float, nullable=False, default=0)
    product_height = Column(Float, nullable=False, default=0)
    product_width = Column(Float, nullable=False, default=0)
    product_length = Column(Float, nullable=False, default=0)
    package_weight = Column(Float, nullable=False, default=0)
    package_height = Column(Float, nullable=False, default=0)
    package_width = Column(Float, nullable=False, default=0)
    package_length = Column(Float, nullable=False, default=0)
    quantity_per_package = Column(Integer, nullable=False, default=1)
    available_on = Column(DateTime(timezone=True), server_default=func.now())


class TimestampMixin:
    created_on = Column(DateTime(timezone=True), server_default=func.now())
    updated_on = Column(DateTime(timezone=True), onupdate=func.now())
    archived_on = Column(DateTime(timezone=True), index=True)
