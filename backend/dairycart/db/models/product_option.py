"""SQLAlchemy models for option axes and their values."""

from sqlalchemy import Column, ForeignKey, Integer, String

from dairycart.db.base import Base
from dairycart.db.models._mixins import TimestampMixin


class ProductOption(TimestampMixin, Base):
    __tablename__ = "product_options"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    product_root_id = Column(
        Integer, ForeignKey("product_roots.id"), nullable=False, index=True
    )


class ProductOptionValue(TimestampMixin, Base):
    __tablename__ = "product_option_values"

    id = Column(Integer, primary_key=True)
    product_option_id = Column(
        Integer, ForeignKey("product_options.id"), nullable=False, index=True
    )
    value = Column(String(50), nullable=False)
