"""Tests for the product creation workflow."""
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from dairycart.api.schemas.product import ProductCreationInput
from dairycart.db.models import (
    Product,
    ProductOption,
    ProductOptionValue,
    ProductRoot,
    ProductVariantBridge,
)
from dairycart.db.storer import Storer
from dairycart.services.errors import (
    DuplicateProductSKU,
    DuplicateSKUPrefix,
    InvalidProductInput,
    ProductCreationFailed,
)
from dairycart.services.product_creation import CreationState, create_product_family
from dairycart.services.variants import SHARED_PRODUCT_FIELDS, VARIANT_FIELDS

EXPECTED_SKUS = [
    "t-shirt_small_red",
    "t-shirt_small_green",
    "t-shirt_small_blue",
    "t-shirt_medium_red",
    "t-shirt_medium_green",
    "t-shirt_medium_blue",
    "t-shirt_large_red",
    "t-shirt_large_green",
    "t-shirt_large_blue",
]


class FailingStorer(Storer):
    """Fails the nth product insert."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.product_inserts = 0

    def create_product(self, db, product):
        self.product_inserts += 1
        if self.product_inserts == self.fail_on:
            raise SQLAlchemyError("simulated insert failure")
        return super().create_product(db, product)


class StaleLookupStorer(Storer):
    """Reports every prefix and SKU as free, like lookups that lost a race."""

    def product_root_with_sku_prefix_exists(self, db, sku_prefix):
        return False

    def get_live_product_skus(self, db, skus):
        return set()


class BridgeFailingStorer(Storer):
    """Fails linking the nth variant to its option values."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.bridge_inserts = 0

    def create_multiple_product_variant_bridges_for_product_id(
        self, db, product_id, option_value_ids
    ):
        self.bridge_inserts += 1
        if self.bridge_inserts == self.fail_on:
            raise SQLAlchemyError("simulated bridge insert failure")
        return super().create_multiple_product_variant_bridges_for_product_id(
            db, product_id, option_value_ids
        )


def _count(db, model):
    return db.scalar(select(func.count()).select_from(model))


def test_creates_one_variant_per_combination(db, storer, product_payload):
    family = create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert family.state is CreationState.COMMITTED
    result = family.to_read()
    assert result.sku_prefix == "t-shirt"
    assert [p.sku for p in result.products] == EXPECTED_SKUS
    assert result.products[0].option_summary == "Size: small, Color: red"
    assert [v.value for v in result.products[0].applicable_options] == ["small", "red"]
    assert [o.name for o in result.options] == ["Size", "Color"]
    assert [v.value for v in result.options[1].values] == ["red", "green", "blue"]

    assert _count(db, ProductRoot) == 1
    assert _count(db, ProductOption) == 2
    assert _count(db, ProductOptionValue) == 6
    assert _count(db, Product) == 9
    assert _count(db, ProductVariantBridge) == 18


def test_product_without_options_gets_single_variant(db, storer, product_payload):
    product_payload.update(sku="mug", options=[])

    result = create_product_family(db, storer, ProductCreationInput(**product_payload)).to_read()

    assert len(result.products) == 1
    product = result.products[0]
    assert product.sku == "mug"
    assert product.option_summary == ""
    assert product.applicable_options == []
    assert _count(db, ProductVariantBridge) == 0
    assert _count(db, ProductOption) == 0


def test_failure_midway_leaves_nothing_behind(db, product_payload):
    storer = FailingStorer(fail_on=5)

    with pytest.raises(ProductCreationFailed) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert excinfo.value.state == CreationState.OPTIONS_CREATED.value
    assert excinfo.value.attempted_task == "insert products in database"
    assert not storer.product_root_with_sku_prefix_exists(db, "t-shirt")
    for model in (ProductRoot, ProductOption, ProductOptionValue, Product, ProductVariantBridge):
        assert _count(db, model) == 0


def test_duplicate_prefix_is_rejected(db, storer, product_payload):
    create_product_family(db, storer, ProductCreationInput(**product_payload))

    with pytest.raises(DuplicateSKUPrefix) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert "already exists" in str(excinfo.value)
    assert _count(db, ProductRoot) == 1
    assert _count(db, Product) == 9


def test_prefix_taken_after_lookup_is_reported_as_duplicate(db, storer, product_payload):
    create_product_family(db, storer, ProductCreationInput(**product_payload))

    with pytest.raises(DuplicateSKUPrefix):
        create_product_family(db, StaleLookupStorer(), ProductCreationInput(**product_payload))

    assert _count(db, ProductRoot) == 1
    assert _count(db, ProductOption) == 2


def test_invalid_sku_is_rejected(db, storer, product_payload):
    product_payload["sku"] = "t shirt!"

    with pytest.raises(InvalidProductInput) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert str(excinfo.value) == "the sku received (t shirt!) is invalid"
    assert _count(db, ProductRoot) == 0


def test_repeated_option_name_is_rejected(db, storer, product_payload):
    product_payload["options"].append({"name": "Size", "values": ["tiny"]})

    with pytest.raises(InvalidProductInput):
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert _count(db, ProductRoot) == 0


def test_option_values_differing_only_in_case_are_rejected(db, storer, product_payload):
    product_payload["options"] = [{"name": "Color", "values": ["Red", "red"]}]

    with pytest.raises(InvalidProductInput) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert "red" in str(excinfo.value)
    assert _count(db, ProductOption) == 0


def test_shared_fields_match_with_and_without_options(db, storer, product_payload):
    product_payload["available_on"] = datetime(2024, 1, 1, tzinfo=timezone.utc).isoformat()
    single = dict(product_payload, sku="mug", options=[])

    single_result = create_product_family(db, storer, ProductCreationInput(**single)).to_read()
    family_result = create_product_family(
        db, storer, ProductCreationInput(**product_payload)
    ).to_read()

    fields = SHARED_PRODUCT_FIELDS | VARIANT_FIELDS
    expected = single_result.products[0].model_dump(include=fields)
    for product in family_result.products:
        assert product.model_dump(include=fields) == expected


def test_defaults_are_resolved_once_for_all_variants(db, storer, product_payload):
    product_payload["quantity_per_package"] = 0

    result = create_product_family(db, storer, ProductCreationInput(**product_payload)).to_read()

    assert {p.quantity_per_package for p in result.products} == {1}
    assert len({p.available_on for p in result.products}) == 1
    assert result.products[0].available_on is not None


ALL_TABLES = (ProductRoot, ProductOption, ProductOptionValue, Product, ProductVariantBridge)


def test_failed_variant_link_leaves_nothing_behind(db, product_payload):
    storer = BridgeFailingStorer(fail_on=4)

    with pytest.raises(ProductCreationFailed) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert excinfo.value.state == CreationState.OPTIONS_CREATED.value
    assert storer.bridge_inserts == 4
    assert not storer.product_with_sku_exists(db, "t-shirt_small_red")
    for model in ALL_TABLES:
        assert _count(db, model) == 0


def test_failed_commit_leaves_nothing_behind(db, storer, product_payload, monkeypatch):
    def failing_commit():
        raise SQLAlchemyError("simulated commit failure")

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(ProductCreationFailed) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert excinfo.value.state == CreationState.VARIANTS_CREATED.value
    assert excinfo.value.attempted_task == "close out transaction"
    for model in ALL_TABLES:
        assert _count(db, model) == 0


def test_taken_variant_sku_is_rejected_before_writing(db, storer, product_payload):
    single = dict(product_payload, sku="t-shirt_small_red", options=[])
    create_product_family(db, storer, ProductCreationInput(**single))

    with pytest.raises(DuplicateProductSKU) as excinfo:
        create_product_family(db, storer, ProductCreationInput(**product_payload))

    assert str(excinfo.value) == "product with sku 't-shirt_small_red' already exists"
    assert excinfo.value.sku == "t-shirt_small_red"
    assert _count(db, ProductRoot) == 1
    assert _count(db, Product) == 1


def test_variant_sku_taken_after_lookup_is_reported_as_duplicate(db, storer, product_payload):
    single = dict(product_payload, sku="t-shirt_medium_blue", options=[])
    create_product_family(db, storer, ProductCreationInput(**single))

    with pytest.raises(DuplicateProductSKU):
        create_product_family(db, StaleLookupStorer(), ProductCreationInput(**product_payload))

    assert _count(db, ProductRoot) == 1
    assert _count(db, ProductOption) == 0
    assert _count(db, Product) == 1


def test_archived_variant_sku_does_not_block_creation(db, storer, product_payload):
    single = dict(product_payload, sku="t-shirt_small_red", options=[])
    family = create_product_family(db, storer, ProductCreationInput(**single))
    storer.delete_product(db, family.variants[0].product.id)
    db.commit()

    result = create_product_family(db, storer, ProductCreationInput(**product_payload)).to_read()

    assert result.products[0].sku == "t-shirt_small_red"
