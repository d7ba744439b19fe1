"""Product root listing, lookup and cascading archival."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dairycart.api.dependencies.db import get_session
from dairycart.api.dependencies.pagination import ListParams, get_list_params
from dairycart.api.errors import internal_issue, row_does_not_exist
from dairycart.api.schemas.common import ListResponse
from dairycart.api.schemas.product import ProductRootRead
from dairycart.db.storer import Storer, get_storer
from dairycart.services import catalog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/product_roots",
    summary="List product roots with their variants",
    response_model=ListResponse[ProductRootRead],
)
async def list_product_roots(
    params: ListParams = Depends(get_list_params),
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ListResponse[ProductRootRead]:
    try:
        count = storer.get_product_root_count(db)
        roots = storer.get_product_root_list(db, params.page, params.limit)
        return ListResponse[ProductRootRead](
            count=count,
            limit=params.limit,
            page=params.page,
            data=[
                catalog.load_product_root(db, storer, root, include_options=False)
                for root in roots
            ],
        )
    except SQLAlchemyError as e:
        raise internal_issue("retrieve product roots from database", e) from e


@router.get(
    "/product_root/{root_id}",
    summary="Get a product root with its options and variants",
    response_model=ProductRootRead,
)
async def get_product_root(
    root_id: int,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductRootRead:
    try:
        root = storer.get_product_root(db, root_id)
        if root is None:
            raise row_does_not_exist("product root", root_id)
        return catalog.load_product_root(db, storer, root)
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        raise internal_issue("retrieve product root from database", e) from e


@router.delete(
    "/product_root/{root_id}",
    summary="Archive a product root and everything generated from it",
    response_model=ProductRootRead,
)
async def delete_product_root(
    root_id: int,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ProductRootRead:
    """Archive a root with its variants, options, values and variant links.

    Everything is archived in one transaction; the response shows the family
    as it was just before archival.
    """
    try:
        root = storer.get_product_root(db, root_id)
        if root is None:
            raise row_does_not_exist("product root", root_id)

        result = catalog.load_product_root(db, storer, root)

        storer.archive_product_variant_bridges_with_product_root_id(db, root_id)
        storer.archive_product_option_values_with_product_root_id(db, root_id)
        storer.archive_product_options_with_product_root_id(db, root_id)
        archived_products = storer.archive_products_with_product_root_id(db, root_id)
        archived_on = storer.delete_product_root(db, root_id)
        db.commit()

        logger.info(
            f"Archived product root {root_id} ('{root.sku_prefix}') "
            f"and {archived_products} product(s)"
        )
        return result.model_copy(update={"archived_on": archived_on})

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("archive product root in database", e) from e
