"""Create a product root, its options and every generated variant atomically.

The workflow is linear::

    start -> root_created -> options_created -> variants_created -> committed

Any failure before ``committed`` rolls back the whole session, so a request
either leaves a complete product family behind or nothing at all. Webhook
notification happens after commit and is scheduled by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dairycart.api.schemas.product import (
    ProductCreationInput,
    ProductOptionCreationInput,
    ProductRootRead,
)
from dairycart.db.models import ProductOption, ProductOptionValue, ProductRoot
from dairycart.db.storer import Storer
from dairycart.services import catalog
from dairycart.services.errors import (
    DuplicateProductSKU,
    DuplicateSKUPrefix,
    InvalidProductInput,
    ProductCreationFailed,
)
from dairycart.services.variants import (
    MaterializedVariant,
    OptionGroup,
    generate_combinations,
    materialize_single_variant,
    materialize_variant,
    new_product_root_from_creation_input,
    planned_variant_skus,
)
from dairycart.utils.validators import find_duplicates, restricted_string_is_valid

logger = logging.getLogger(__name__)


class CreationState(str, Enum):
    START = "start"
    ROOT_CREATED = "root_created"
    OPTIONS_CREATED = "options_created"
    VARIANTS_CREATED = "variants_created"
    COMMITTED = "committed"


# what the workflow was doing when it failed in a given state
_ATTEMPTED_TASKS = {
    CreationState.START: "insert product root in database",
    CreationState.ROOT_CREATED: "insert product options and values in database",
    CreationState.OPTIONS_CREATED: "insert products in database",
    CreationState.VARIANTS_CREATED: "close out transaction",
}


@dataclass
class CreatedOption:
    option: ProductOption
    values: list[ProductOptionValue] = field(default_factory=list)


@dataclass
class ProductFamily:
    root: ProductRoot
    options: list[CreatedOption]
    variants: list[MaterializedVariant]
    state: CreationState = CreationState.START

    def to_read(self) -> ProductRootRead:
        variants = sorted(self.variants, key=lambda v: v.combination_index)
        return ProductRootRead.model_validate(self.root).model_copy(
            update={
                "options": [catalog.option_read(o.option, o.values) for o in self.options],
                "products": [
                    catalog.product_read(v.product, v.option_values) for v in variants
                ],
            }
        )


def validate_creation_input(payload: ProductCreationInput) -> None:
    """Reject input that must never reach the database."""
    if not restricted_string_is_valid(payload.sku):
        raise InvalidProductInput(f"the sku received ({payload.sku}) is invalid")

    duplicate_names = find_duplicates([o.name for o in payload.options])
    if duplicate_names:
        raise InvalidProductInput(
            f"product option '{duplicate_names[0]}' was provided more than once"
        )

    for option in payload.options:
        # values are lower-cased into SKUs, so compare without case
        duplicate_values = find_duplicates(option.values)
        if duplicate_values:
            raise InvalidProductInput(
                f"product option value '{duplicate_values[0]}' already exists "
                f"for option '{option.name}'"
            )


def normalize_creation_input(
    payload: ProductCreationInput, now: datetime | None = None
) -> ProductCreationInput:
    """Resolve defaults once so every variant receives identical shared fields."""
    return payload.model_copy(
        update={
            "quantity_per_package": max(payload.quantity_per_package, 1),
            "available_on": payload.available_on or now or datetime.now(timezone.utc),
        }
    )


def create_product_option_and_values(
    db: Session,
    storer: Storer,
    option_input: ProductOptionCreationInput,
    root_id: int,
) -> CreatedOption:
    """Insert an option and its values in the order the caller gave them."""
    option = ProductOption(name=option_input.name, product_root_id=root_id)
    storer.create_product_option(db, option)

    created = CreatedOption(option=option)
    for value in option_input.values:
        option_value = ProductOptionValue(product_option_id=option.id, value=value)
        storer.create_product_option_value(db, option_value)
        created.values.append(option_value)
    return created


def create_product_family(
    db: Session,
    storer: Storer,
    payload: ProductCreationInput,
) -> ProductFamily:
    """Run the product creation workflow and commit it.

    Raises:
        InvalidProductInput: bad SKU or option input; nothing was written.
        DuplicateSKUPrefix: a live root already uses the SKU; nothing was written.
        DuplicateProductSKU: a generated variant SKU is already taken; nothing
            was written.
        ProductCreationFailed: a write or the commit failed; the session was
            rolled back.
    """
    validate_creation_input(payload)

    if storer.product_root_with_sku_prefix_exists(db, payload.sku):
        raise DuplicateSKUPrefix(payload.sku)

    planned_skus = planned_variant_skus(payload.sku, payload.options)
    taken = storer.get_live_product_skus(db, planned_skus)
    if taken:
        raise DuplicateProductSKU(next(sku for sku in planned_skus if sku in taken))

    template = normalize_creation_input(payload)
    state = CreationState.START

    try:
        root = new_product_root_from_creation_input(template)
        storer.create_product_root(db, root)
        state = CreationState.ROOT_CREATED

        options = [
            create_product_option_and_values(db, storer, option_input, root.id)
            for option_input in template.options
        ]
        state = CreationState.OPTIONS_CREATED

        if not options:
            variants = [materialize_single_variant(db, storer, template, root)]
        else:
            groups = [OptionGroup(name=o.option.name, values=o.values) for o in options]
            variants = [
                materialize_variant(db, storer, template, root, combination)
                for combination in generate_combinations(groups)
            ]
        state = CreationState.VARIANTS_CREATED

        db.commit()
        state = CreationState.COMMITTED
    except Exception as e:
        db.rollback()
        if isinstance(e, IntegrityError) and state is CreationState.START:
            # a concurrent request claimed the prefix after our existence check
            logger.warning(f"SKU prefix '{payload.sku}' was taken during creation: {e}")
            raise DuplicateSKUPrefix(payload.sku) from e
        if isinstance(e, IntegrityError) and state is CreationState.OPTIONS_CREATED:
            logger.warning(f"A variant sku for '{payload.sku}' was taken during creation: {e}")
            raise DuplicateProductSKU() from e
        attempted_task = _ATTEMPTED_TASKS.get(state, "create product")
        logger.error(
            f"Product creation for sku '{payload.sku}' failed to {attempted_task}: {e}",
            exc_info=True,
        )
        raise ProductCreationFailed(state.value, attempted_task) from e

    logger.info(
        f"Created product root {root.id} ('{root.sku_prefix}') with "
        f"{len(options)} option(s) and {len(variants)} variant(s)"
    )
    return ProductFamily(root=root, options=options, variants=variants, state=state)
