"""Assemble response payloads for roots, options and variants."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from dairycart.api.schemas.product import (
    ProductOptionRead,
    ProductOptionValueRead,
    ProductRead,
    ProductRootRead,
)
from dairycart.db.models import Product, ProductOption, ProductOptionValue, ProductRoot
from dairycart.db.storer import Storer


def option_value_reads(values: Iterable[ProductOptionValue]) -> list[ProductOptionValueRead]:
    return [ProductOptionValueRead.model_validate(v) for v in values]


def product_read(
    product: Product,
    option_values: Iterable[ProductOptionValue] = (),
) -> ProductRead:
    return ProductRead.model_validate(product).model_copy(
        update={"applicable_options": option_value_reads(option_values)}
    )


def option_read(
    option: ProductOption,
    values: Iterable[ProductOptionValue] = (),
) -> ProductOptionRead:
    return ProductOptionRead.model_validate(option).model_copy(
        update={"values": option_value_reads(values)}
    )


def load_product(db: Session, storer: Storer, product: Product) -> ProductRead:
    return product_read(product, storer.get_option_values_for_product(db, product.id))


def load_option(db: Session, storer: Storer, option: ProductOption) -> ProductOptionRead:
    return option_read(option, storer.get_product_option_values_for_option(db, option.id))


def load_product_root(
    db: Session,
    storer: Storer,
    root: ProductRoot,
    include_options: bool = True,
) -> ProductRootRead:
    """Read a root together with its live variants and, optionally, its options."""
    products = [
        load_product(db, storer, p)
        for p in storer.get_products_by_product_root_id(db, root.id)
    ]
    options: list[ProductOptionRead] = []
    if include_options:
        options = [
            load_option(db, storer, o)
            for o in storer.get_product_options_by_product_root_id(db, root.id)
        ]
    return ProductRootRead.model_validate(root).model_copy(
        update={"options": options, "products": products}
    )
