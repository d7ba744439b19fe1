"""Manage the options attached to an existing product root."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dairycart.api.dependencies.db import get_session
from dairycart.api.dependencies.pagination import ListParams, get_list_params
from dairycart.api.errors import internal_issue, invalid_request_body, row_does_not_exist
from dairycart.api.schemas.common import ListResponse
from dairycart.api.schemas.product import (
    ProductOptionCreationInput,
    ProductOptionRead,
    ProductOptionUpdateInput,
    ProductOptionValueCreationInput,
    ProductOptionValueRead,
)
from dairycart.db.models import ProductOptionValue
from dairycart.db.storer import Storer, get_storer
from dairycart.services import catalog
from dairycart.services.product_creation import create_product_option_and_values
from dairycart.utils.validators import find_duplicates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/product_root/{root_id}/options",
    summary="List the options of a product root",
    response_model=ListResponse[ProductOptionRead],
)
async def list_product_options(
    root_id: int,
    params: ListParams = Depends(get_list_params),
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ListResponse[ProductOptionRead]:
    try:
        if not storer.product_root_exists(db, root_id):
            raise row_does_not_exist("product root", root_id)

        options = storer.get_product_options_by_product_root_id(db, root_id)
        start = (params.page - 1) * params.limit
        page = options[start : start + params.limit]
        return ListResponse[ProductOptionRead](
            count=len(options),
            limit=params.limit,
            page=params.page,
            data=[catalog.load_option(db, storer, o) for o in page],
        )
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        raise internal_issue("retrieve product options from database", e) from e


@router.post(
    "/product_root/{root_id}/options",
    summary="Add an option with its values to a product root",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductOptionRead,
)
async def create_product_option(
    root_id: int,
    payload: ProductOptionCreationInput,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductOptionRead:
    """Create an option and its values.

    Existing variants are left untouched; no new variants are generated.
    """
    try:
        if not storer.product_root_exists(db, root_id):
            raise row_does_not_exist("product root", root_id)

        if storer.product_option_with_name_exists_for_product_root(db, payload.name, root_id):
            raise invalid_request_body(
                f"product option with the name '{payload.name}' already exists"
            )

        duplicates = find_duplicates(payload.values)
        if duplicates:
            raise invalid_request_body(
                f"product option value '{duplicates[0]}' was provided more than once"
            )

        created = create_product_option_and_values(db, storer, payload, root_id)
        db.commit()

        logger.info(
            f"Created product option {created.option.id} ('{payload.name}') "
            f"with {len(created.values)} value(s) for root {root_id}"
        )
        return catalog.option_read(created.option, created.values)

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("create product option in database", e) from e


@router.patch(
    "/product_options/{option_id}",
    summary="Rename a product option",
    response_model=ProductOptionRead,
)
async def update_product_option(
    option_id: int,
    payload: ProductOptionUpdateInput,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductOptionRead:
    try:
        option = storer.get_product_option(db, option_id)
        if option is None:
            raise row_does_not_exist("product option", option_id)

        if payload.name != option.name and storer.product_option_with_name_exists_for_product_root(
            db, payload.name, option.product_root_id
        ):
            raise invalid_request_body(
                f"product option with the name '{payload.name}' already exists"
            )

        option.name = payload.name
        storer.update_product_option(db, option)
        db.commit()
        db.refresh(option)

        logger.info(f"Updated product option {option_id}")
        return catalog.load_option(db, storer, option)

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("update product option in database", e) from e


@router.delete(
    "/product_options/{option_id}",
    summary="Archive a product option and its values",
    response_model=ProductOptionRead,
)
async def delete_product_option(
    option_id: int,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductOptionRead:
    try:
        option = storer.get_product_option(db, option_id)
        if option is None:
            raise row_does_not_exist("product option", option_id)

        result = catalog.load_option(db, storer, option)

        storer.archive_product_option_values_for_option(db, option_id)
        archived_on = storer.delete_product_option(db, option_id)
        db.commit()

        logger.info(f"Archived product option {option_id}")
        return result.model_copy(update={"archived_on": archived_on})

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("archive product option in database", e) from e


@router.post(
    "/product_options/{option_id}/value",
    summary="Add a value to a product option",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductOptionValueRead,
)
async def create_product_option_value(
    option_id: int,
    payload: ProductOptionValueCreationInput,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductOptionValueRead:
    try:
        if not storer.product_option_exists(db, option_id):
            raise row_does_not_exist("product option", option_id)

        if storer.product_option_value_for_option_id_exists(db, option_id, payload.value):
            raise invalid_request_body(
                f"product option value '{payload.value}' already exists for option ID {option_id}"
            )

        value = ProductOptionValue(product_option_id=option_id, value=payload.value)
        storer.create_product_option_value(db, value)
        db.commit()
        db.refresh(value)

        logger.info(f"Created product option value {value.id} for option {option_id}")
        return ProductOptionValueRead.model_validate(value)

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("create product option value in database", e) from e
