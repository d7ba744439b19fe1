"""Update and archive individual product option values."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dairycart.api.dependencies.db import get_session
from dairycart.api.errors import internal_issue, invalid_request_body, row_does_not_exist
from dairycart.api.schemas.product import (
    ProductOptionValueRead,
    ProductOptionValueUpdateInput,
)
from dairycart.db.storer import Storer, get_storer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.patch(
    "/product_option_values/{value_id}",
    summary="Update a product option value",
    response_model=ProductOptionValueRead,
)
async def update_product_option_value(
    value_id: int,
    payload: ProductOptionValueUpdateInput,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductOptionValueRead:
    try:
        option_value = storer.get_product_option_value(db, value_id)
        if option_value is None:
            raise row_does_not_exist("product option value", value_id)

        # a change of case only collides with the value itself
        renamed = payload.value.lower() != option_value.value.lower()
        if renamed and storer.product_option_value_for_option_id_exists(
            db, option_value.product_option_id, payload.value
        ):
            raise invalid_request_body(
                f"product option value '{payload.value}' already exists "
                f"for option ID {option_value.product_option_id}"
            )

        option_value.value = payload.value
        storer.update_product_option_value(db, option_value)
        db.commit()
        db.refresh(option_value)

        logger.info(f"Updated product option value {value_id}")
        return ProductOptionValueRead.model_validate(option_value)

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("update product option value in database", e) from e


@router.delete(
    "/product_option_values/{value_id}",
    summary="Archive a product option value",
    response_model=ProductOptionValueRead,
)
async def delete_product_option_value(
    value_id: int,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductOptionValueRead:
    try:
        option_value = storer.get_product_option_value(db, value_id)
        if option_value is None:
            raise row_does_not_exist("product option value", value_id)

        archived_on = storer.delete_product_option_value(db, value_id)
        db.commit()

        logger.info(f"Archived product option value {value_id}")
        return ProductOptionValueRead.model_validate(option_value).model_copy(
            update={"archived_on": archived_on}
        )

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("archive product option value in database", e) from e
