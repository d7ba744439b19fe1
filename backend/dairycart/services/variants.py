"""Expand a product's option axes into concrete, persisted variants.

A product with options ``Size: [small, medium]`` and ``Color: [red, blue]``
yields four variants. Combinations are produced with the first option as the
outermost loop and the last option varying fastest, so for identical input
the generated SKUs and their order never change.
"""

from __future__ import annotations

from dataclasses import dataclass
import itertools
import logging
from typing import Any, Iterable, Sequence

from sqlalchemy.orm import Session

from dairycart.api.schemas.product import (
    ProductCreationInput,
    ProductFields,
    ProductOptionCreationInput,
)
from dairycart.db.models import Product, ProductOptionValue, ProductRoot
from dairycart.db.storer import Storer

logger = logging.getLogger(__name__)

SKU_SEPARATOR = "_"
SUMMARY_SEPARATOR = ", "

SHARED_PRODUCT_FIELDS = frozenset(ProductFields.model_fields) | {"available_on"}
VARIANT_FIELDS = frozenset({"upc", "quantity", "price", "on_sale", "sale_price"})


@dataclass(frozen=True)
class OptionGroup:
    """One axis of variation: a name and its ordered value entries.

    Value entries only need ``id`` and ``value`` attributes.
    """

    name: str
    values: Sequence[Any]


@dataclass(frozen=True)
class OptionCombination:
    """One element of the Cartesian product of a product's option values."""

    index: int
    option_names: tuple[str, ...]
    values: tuple[Any, ...]

    @property
    def sku_suffix(self) -> str:
        return SKU_SEPARATOR.join(str(v.value).lower() for v in self.values)

    @property
    def summary(self) -> str:
        return SUMMARY_SEPARATOR.join(
            f"{name}: {v.value}" for name, v in zip(self.option_names, self.values)
        )

    @property
    def option_value_ids(self) -> list[int]:
        return [v.id for v in self.values]


@dataclass
class MaterializedVariant:
    product: Product
    option_values: list[ProductOptionValue]
    combination_index: int = 0


def generate_combinations(option_groups: Iterable[OptionGroup]) -> list[OptionCombination]:
    """Return every combination of one value per group, in nested-loop order.

    A product without options is not a combination of anything; callers
    create its single variant directly, so an empty input yields no records.
    """
    groups = list(option_groups)
    if not groups:
        return []

    names = tuple(group.name for group in groups)
    return [
        OptionCombination(index=i, option_names=names, values=values)
        for i, values in enumerate(itertools.product(*(group.values for group in groups)))
    ]


@dataclass(frozen=True)
class PlannedValue:
    """An option value that has not been written yet."""

    value: str
    id: int | None = None


def planned_variant_skus(
    sku_prefix: str, options: Iterable[ProductOptionCreationInput]
) -> list[str]:
    """SKUs a creation request will produce, in generation order."""
    groups = [
        OptionGroup(name=o.name, values=[PlannedValue(v) for v in o.values]) for o in options
    ]
    if not groups:
        return [sku_prefix]
    return [
        f"{sku_prefix}{SKU_SEPARATOR}{combination.sku_suffix}"
        for combination in generate_combinations(groups)
    ]


def new_product_root_from_creation_input(template: ProductCreationInput) -> ProductRoot:
    fields = template.model_dump(include=SHARED_PRODUCT_FIELDS)
    return ProductRoot(sku_prefix=template.sku, **fields)


def new_product_from_creation_input(template: ProductCreationInput) -> Product:
    """Build an unsaved variant carrying a fresh copy of the template's fields.

    Both the single-variant and the per-combination paths go through here, so
    shared pricing and dimension fields are identical between them.
    """
    fields = template.model_dump(include=SHARED_PRODUCT_FIELDS | VARIANT_FIELDS)
    return Product(sku=template.sku, option_summary="", **fields)


def build_variant(
    template: ProductCreationInput,
    root: ProductRoot,
    combination: OptionCombination,
) -> Product:
    product = new_product_from_creation_input(template)
    product.product_root_id = root.id
    product.sku = f"{root.sku_prefix}{SKU_SEPARATOR}{combination.sku_suffix}"
    product.option_summary = combination.summary
    return product


def materialize_variant(
    db: Session,
    storer: Storer,
    template: ProductCreationInput,
    root: ProductRoot,
    combination: OptionCombination,
) -> MaterializedVariant:
    """Insert one variant and link it to the option values that produced it.

    Errors from either write propagate to the caller, which owns the
    transaction and decides to roll back.
    """
    product = build_variant(template, root, combination)
    product_id, _, _ = storer.create_product(db, product)
    storer.create_multiple_product_variant_bridges_for_product_id(
        db, product_id, combination.option_value_ids
    )
    logger.debug(f"Created variant {product.sku} for root {root.id}")
    return MaterializedVariant(
        product=product,
        option_values=list(combination.values),
        combination_index=combination.index,
    )


def materialize_single_variant(
    db: Session,
    storer: Storer,
    template: ProductCreationInput,
    root: ProductRoot,
) -> MaterializedVariant:
    """Insert the only variant of a product that has no options."""
    product = new_product_from_creation_input(template)
    product.product_root_id = root.id
    product.sku = root.sku_prefix
    storer.create_product(db, product)
    logger.debug(f"Created single variant {product.sku} for root {root.id}")
    return MaterializedVariant(product=product, option_values=[])
