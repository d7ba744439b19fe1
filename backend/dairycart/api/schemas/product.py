"""Pydantic models describing product roots, variants, options and values."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, field_validator


class ProductFields(BaseModel):
    """Fields shared by a product root and every variant generated from it."""

    name: str = Field(..., min_length=1)
    subtitle: str = ""
    description: str = ""
    manufacturer: str = ""
    brand: str = ""
    taxable: bool = False
    cost: float = 0
    product_weight: float = 0
    product_height: float = 0
    product_width: float = 0
    product_length: float = 0
    package_weight: float = 0
    package_height: float = 0
    package_width: float = 0
    package_length: float = 0
    quantity_per_package: int = 1


OptionValueText = Annotated[str, Field(min_length=1, max_length=50)]


class ProductOptionCreationInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    values: list[OptionValueText] = Field(..., min_length=1)

    @field_validator("values")
    @classmethod
    def values_are_not_blank(cls, v: list[str]) -> list[str]:
        if any(not value.strip() for value in v):
            raise ValueError("option values cannot be blank")
        return v


class ProductOptionUpdateInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class ProductOptionValueCreationInput(BaseModel):
    value: OptionValueText


class ProductOptionValueUpdateInput(BaseModel):
    value: OptionValueText


class ProductCreationInput(ProductFields):
    """Body of a product creation request.

    ``sku`` becomes the root's SKU prefix. Each entry in ``options`` is one
    axis of variation; one variant is generated per combination of values.
    """

    sku: str
    upc: str = ""
    quantity: int = Field(0, ge=0)
    price: float = 0
    on_sale: bool = False
    sale_price: float = 0
    available_on: datetime | None = None
    options: list[ProductOptionCreationInput] = Field(default_factory=list)


class ProductUpdateInput(BaseModel):
    """Partial update of a single variant; omitted fields keep their value."""

    name: str | None = Field(None, min_length=1)
    subtitle: str | None = None
    description: str | None = None
    sku: str | None = None
    upc: str | None = None
    manufacturer: str | None = None
    brand: str | None = None
    quantity: int | None = Field(None, ge=0)
    taxable: bool | None = None
    price: float | None = None
    on_sale: bool | None = None
    sale_price: float | None = None
    cost: float | None = None
    product_weight: float | None = None
    product_height: float | None = None
    product_width: float | None = None
    product_length: float | None = None
    package_weight: float | None = None
    package_height: float | None = None
    package_width: float | None = None
    package_length: float | None = None
    quantity_per_package: int | None = Field(None, ge=1)
    available_on: datetime | None = None


class ProductOptionValueRead(BaseModel):
    id: int
    product_option_id: int
    value: str
    created_on: datetime | None = None
    updated_on: datetime | None = None
    archived_on: datetime | None = None

    model_config = {"from_attributes": True}


class ProductOptionRead(BaseModel):
    id: int
    name: str
    product_root_id: int
    created_on: datetime | None = None
    updated_on: datetime | None = None
    archived_on: datetime | None = None
    values: list[ProductOptionValueRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ProductRead(ProductFields):
    id: int
    product_root_id: int
    sku: str
    option_summary: str = ""
    upc: str = ""
    quantity: int = 0
    price: float = 0
    on_sale: bool = False
    sale_price: float = 0
    available_on: datetime | None = None
    created_on: datetime | None = None
    updated_on: datetime | None = None
    archived_on: datetime | None = None
    applicable_options: list[ProductOptionValueRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ProductRootRead(ProductFields):
    id: int
    sku_prefix: str
    available_on: datetime | None = None
    created_on: datetime | None = None
    updated_on: datetime | None = None
    archived_on: datetime | None = None
    options: list[ProductOptionRead] = Field(default_factory=list)
    products: list[ProductRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}
