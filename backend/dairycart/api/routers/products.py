"""Product creation, lookup, update and archival endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dairycart.api.dependencies.db import get_session
from dairycart.api.dependencies.pagination import ListParams, get_list_params
from dairycart.api.errors import internal_issue, invalid_request_body, row_does_not_exist
from dairycart.api.schemas.common import ListResponse
from dairycart.api.schemas.product import (
    ProductCreationInput,
    ProductRead,
    ProductRootRead,
    ProductUpdateInput,
)
from dairycart.db.storer import Storer, get_storer
from dairycart.services import catalog
from dairycart.services.errors import (
    DuplicateSKUPrefix,
    InvalidProductInput,
    ProductCreationFailed,
)
from dairycart.services.product_creation import create_product_family
from dairycart.services.webhook_dispatch import build_event_payload
from dairycart.services.webhook_service import (
    PRODUCT_ARCHIVED_EVENT,
    PRODUCT_CREATED_EVENT,
    PRODUCT_UPDATED_EVENT,
    trigger_webhooks,
)
from dairycart.utils.validators import restricted_string_is_valid

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/products",
    summary="List live products",
    response_model=ListResponse[ProductRead],
)
async def list_products(
    params: ListParams = Depends(get_list_params),
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ListResponse[ProductRead]:
    try:
        count = storer.get_product_count(db)
        products = storer.get_product_list(db, params.page, params.limit)
        return ListResponse[ProductRead](
            count=count,
            limit=params.limit,
            page=params.page,
            data=[catalog.load_product(db, storer, p) for p in products],
        )
    except SQLAlchemyError as e:
        raise internal_issue("retrieve products from database", e) from e


@router.post(
    "/product",
    summary="Create a product and every variant of its options",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductRootRead,
)
async def create_product(
    payload: ProductCreationInput,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductRootRead:
    """Create a product root, its options and one variant per option combination.

    The whole family is written in a single transaction. Webhooks subscribed
    to ``product_created`` are notified only after that transaction commits.
    """
    try:
        family = create_product_family(db, storer, payload)
    except (InvalidProductInput, DuplicateSKUPrefix) as e:
        raise invalid_request_body(str(e)) from e
    except ProductCreationFailed as e:
        raise internal_issue(e.attempted_task, e) from e

    result = family.to_read()
    background_tasks.add_task(
        trigger_webhooks,
        PRODUCT_CREATED_EVENT,
        build_event_payload(PRODUCT_CREATED_EVENT, result),
    )
    return result


@router.get(
    "/product/{sku}",
    summary="Get a product by SKU",
    response_model=ProductRead,
)
async def get_product(
    sku: str,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductRead:
    try:
        product = storer.get_product_by_sku(db, sku)
        if product is None:
            raise row_does_not_exist("product", sku)
        return catalog.load_product(db, storer, product)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        raise internal_issue("retrieve product from database", e) from e


@router.head("/product/{sku}", summary="Check whether a product exists")
async def product_exists(
    sku: str,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> Response:
    try:
        exists = storer.product_with_sku_exists(db, sku)
    except SQLAlchemyError as e:
        raise internal_issue("check for product existence in database", e) from e

    if not exists:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return Response(status_code=status.HTTP_200_OK)


@router.patch(
    "/product/{sku}",
    summary="Update a product",
    response_model=ProductRead,
)
async def update_product(
    sku: str,
    payload: ProductUpdateInput,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductRead:
    """Apply a partial update to one variant. Only provided fields change."""
    try:
        product = storer.get_product_by_sku(db, sku)
        if product is None:
            raise row_does_not_exist("product", sku)

        updates = payload.model_dump(exclude_unset=True)
        new_sku = updates.get("sku")
        if new_sku is not None and new_sku != product.sku:
            if not restricted_string_is_valid(new_sku):
                raise invalid_request_body(f"the sku received ({new_sku}) is invalid")
            if storer.product_with_sku_exists(db, new_sku):
                raise invalid_request_body(f"product with sku '{new_sku}' already exists")

        for field, value in updates.items():
            if value is None:
                continue
            setattr(product, field, value)

        storer.update_product(db, product)
        db.commit()
        db.refresh(product)

        logger.info(f"Updated product {product.id} ('{sku}')")
        result = catalog.load_product(db, storer, product)

    except HTTPException:
        raise
    except IntegrityError as e:
        db.rollback()
        raise invalid_request_body(f"product with sku '{payload.sku}' already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("update product in database", e) from e

    background_tasks.add_task(
        trigger_webhooks,
        PRODUCT_UPDATED_EVENT,
        build_event_payload(PRODUCT_UPDATED_EVENT, result),
    )
    return result


@router.delete(
    "/product/{sku}",
    summary="Archive a product",
    response_model=ProductRead,
)
async def delete_product(
    sku: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductRead:
    """Archive one variant together with its option value links."""
    try:
        product = storer.get_product_by_sku(db, sku)
        if product is None:
            raise row_does_not_exist("product", sku)

        # read before archiving so the links are still visible
        result = catalog.load_product(db, storer, product)

        storer.archive_product_variant_bridges_for_product_id(db, product.id)
        archived_on = storer.delete_product(db, product.id)
        db.commit()

        logger.info(f"Archived product {product.id} ('{sku}')")
        result = result.model_copy(update={"archived_on": archived_on})

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("archive product in database", e) from e

    background_tasks.add_task(
        trigger_webhooks,
        PRODUCT_ARCHIVED_EVENT,
        build_event_payload(PRODUCT_ARCHIVED_EVENT, result),
    )
    return result
