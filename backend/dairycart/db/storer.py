"""Storage collaborator used by the request handlers and the creation workflow.

Every method takes the caller's session as its first argument so that a
multi-step workflow can run all of its writes inside one transaction. Methods
never commit; committing and rolling back is the caller's decision.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
import logging

from sqlalchemy import exists, func, select, update
from sqlalchemy.orm import Session

from dairycart.db.models import (
    Product,
    ProductOption,
    ProductOptionValue,
    ProductRoot,
    ProductVariantBridge,
    Webhook,
    WebhookExecutionLog,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


class Storer:
    """SQLAlchemy implementation of the catalogue's storage operations."""

    # Product roots

    def product_root_with_sku_prefix_exists(self, db: Session, sku_prefix: str) -> bool:
        query = select(
            exists().where(
                ProductRoot.sku_prefix == sku_prefix,
                ProductRoot.archived_on.is_(None),
            )
        )
        return bool(db.scalar(query))

    def product_root_exists(self, db: Session, root_id: int) -> bool:
        query = select(
            exists().where(ProductRoot.id == root_id, ProductRoot.archived_on.is_(None))
        )
        return bool(db.scalar(query))

    def create_product_root(self, db: Session, root: ProductRoot) -> tuple[int, datetime]:
        db.add(root)
        db.flush()
        return root.id, root.created_on

    def get_product_root(self, db: Session, root_id: int) -> ProductRoot | None:
        return db.scalar(
            select(ProductRoot).where(
                ProductRoot.id == root_id, ProductRoot.archived_on.is_(None)
            )
        )

    def get_product_root_count(self, db: Session) -> int:
        query = select(func.count(ProductRoot.id)).where(ProductRoot.archived_on.is_(None))
        return db.scalar(query) or 0

    def get_product_root_list(self, db: Session, page: int, limit: int) -> Sequence[ProductRoot]:
        query = (
            select(ProductRoot)
            .where(ProductRoot.archived_on.is_(None))
            .order_by(ProductRoot.id)
            .offset(_page_offset(page, limit))
            .limit(limit)
        )
        return db.scalars(query).all()

    def archive_product_variant_bridges_with_product_root_id(self, db: Session, root_id: int) -> int:
        product_ids = select(Product.id).where(Product.product_root_id == root_id)
        stmt = (
            update(ProductVariantBridge)
            .where(
                ProductVariantBridge.product_id.in_(product_ids),
                ProductVariantBridge.archived_on.is_(None),
            )
            .values(archived_on=_utcnow())
        )
        return db.execute(stmt).rowcount

    def archive_product_option_values_with_product_root_id(self, db: Session, root_id: int) -> int:
        option_ids = select(ProductOption.id).where(ProductOption.product_root_id == root_id)
        stmt = (
            update(ProductOptionValue)
            .where(
                ProductOptionValue.product_option_id.in_(option_ids),
                ProductOptionValue.archived_on.is_(None),
            )
            .values(archived_on=_utcnow())
        )
        return db.execute(stmt).rowcount

    def archive_product_options_with_product_root_id(self, db: Session, root_id: int) -> int:
        stmt = (
            update(ProductOption)
            .where(
                ProductOption.product_root_id == root_id,
                ProductOption.archived_on.is_(None),
            )
            .values(archived_on=_utcnow())
        )
        return db.execute(stmt).rowcount

    def archive_products_with_product_root_id(self, db: Session, root_id: int) -> int:
        stmt = (
            update(Product)
            .where(Product.product_root_id == root_id, Product.archived_on.is_(None))
            .values(archived_on=_utcnow())
        )
        return db.execute(stmt).rowcount

    def delete_product_root(self, db: Session, root_id: int) -> datetime:
        archived_on = _utcnow()
        db.execute(
            update(ProductRoot)
            .where(ProductRoot.id == root_id)
            .values(archived_on=archived_on)
        )
        return archived_on

    # Product options

    def product_option_exists(self, db: Session, option_id: int) -> bool:
        query = select(
            exists().where(ProductOption.id == option_id, ProductOption.archived_on.is_(None))
        )
        return bool(db.scalar(query))

    def product_option_with_name_exists_for_product_root(
        self, db: Session, name: str, root_id: int
    ) -> bool:
        query = select(
            exists().where(
                ProductOption.name == name,
                ProductOption.product_root_id == root_id,
                ProductOption.archived_on.is_(None),
            )
        )
        return bool(db.scalar(query))

    def create_product_option(self, db: Session, option: ProductOption) -> tuple[int, datetime]:
        db.add(option)
        db.flush()
        return option.id, option.created_on

    def get_product_option(self, db: Session, option_id: int) -> ProductOption | None:
        return db.scalar(
            select(ProductOption).where(
                ProductOption.id == option_id, ProductOption.archived_on.is_(None)
            )
        )

    def get_product_options_by_product_root_id(self, db: Session, root_id: int) -> Sequence[ProductOption]:
        query = (
            select(ProductOption)
            .where(
                ProductOption.product_root_id == root_id,
                ProductOption.archived_on.is_(None),
            )
            .order_by(ProductOption.id)
        )
        return db.scalars(query).all()

    def update_product_option(self, db: Session, option: ProductOption) -> datetime:
        option.updated_on = _utcnow()
        db.flush()
        return option.updated_on

    def archive_product_option_values_for_option(self, db: Session, option_id: int) -> int:
        stmt = (
            update(ProductOptionValue)
            .where(
                ProductOptionValue.product_option_id == option_id,
                ProductOptionValue.archived_on.is_(None),
            )
            .values(archived_on=_utcnow())
        )
        return db.execute(stmt).rowcount

    def delete_product_option(self, db: Session, option_id: int) -> datetime:
        archived_on = _utcnow()
        db.execute(
            update(ProductOption)
            .where(ProductOption.id == option_id)
            .values(archived_on=archived_on)
        )
        return archived_on

    # Product option values

    def product_option_value_for_option_id_exists(
        self, db: Session, option_id: int, value: str
    ) -> bool:
        """Values are compared without case, as SKU suffixes are lower-cased."""
        query = select(
            exists().where(
                ProductOptionValue.product_option_id == option_id,
                func.lower(ProductOptionValue.value) == value.lower(),
                ProductOptionValue.archived_on.is_(None),
            )
        )
        return bool(db.scalar(query))

    def create_product_option_value(
        self, db: Session, value: ProductOptionValue
    ) -> tuple[int, datetime]:
        db.add(value)
        db.flush()
        return value.id, value.created_on

    def get_product_option_value(self, db: Session, value_id: int) -> ProductOptionValue | None:
        return db.scalar(
            select(ProductOptionValue).where(
                ProductOptionValue.id == value_id,
                ProductOptionValue.archived_on.is_(None),
            )
        )

    def get_product_option_values_for_option(
        self, db: Session, option_id: int
    ) -> Sequence[ProductOptionValue]:
        query = (
            select(ProductOptionValue)
            .where(
                ProductOptionValue.product_option_id == option_id,
                ProductOptionValue.archived_on.is_(None),
            )
            .order_by(ProductOptionValue.id)
        )
        return db.scalars(query).all()

    def update_product_option_value(self, db: Session, value: ProductOptionValue) -> datetime:
        value.updated_on = _utcnow()
        db.flush()
        return value.updated_on

    def delete_product_option_value(self, db: Session, value_id: int) -> datetime:
        archived_on = _utcnow()
        db.execute(
            update(ProductOptionValue)
            .where(ProductOptionValue.id == value_id)
            .values(archived_on=archived_on)
        )
        return archived_on

    # Products

    def product_with_sku_exists(self, db: Session, sku: str) -> bool:
        query = select(exists().where(Product.sku == sku, Product.archived_on.is_(None)))
        return bool(db.scalar(query))

    def get_live_product_skus(self, db: Session, skus: Iterable[str]) -> set[str]:
        """Return which of ``skus`` belong to non-archived products."""
        wanted = list(skus)
        if not wanted:
            return set()
        query = select(Product.sku).where(
            Product.sku.in_(wanted), Product.archived_on.is_(None)
        )
        return set(db.scalars(query).all())

    def get_product_by_sku(self, db: Session, sku: str) -> Product | None:
        return db.scalar(
            select(Product).where(Product.sku == sku, Product.archived_on.is_(None))
        )

    def get_product_count(self, db: Session) -> int:
        query = select(func.count(Product.id)).where(Product.archived_on.is_(None))
        return db.scalar(query) or 0

    def get_product_list(self, db: Session, page: int, limit: int) -> Sequence[Product]:
        query = (
            select(Product)
            .where(Product.archived_on.is_(None))
            .order_by(Product.id)
            .offset(_page_offset(page, limit))
            .limit(limit)
        )
        return db.scalars(query).all()

    def get_products_by_product_root_id(self, db: Session, root_id: int) -> Sequence[Product]:
        query = (
            select(Product)
            .where(Product.product_root_id == root_id, Product.archived_on.is_(None))
            .order_by(Product.id)
        )
        return db.scalars(query).all()

    def create_product(self, db: Session, product: Product) -> tuple[int, datetime, datetime]:
        db.add(product)
        db.flush()
        return product.id, product.available_on, product.created_on

    def update_product(self, db: Session, product: Product) -> datetime:
        product.updated_on = _utcnow()
        db.flush()
        return product.updated_on

    def delete_product(self, db: Session, product_id: int) -> datetime:
        archived_on = _utcnow()
        db.execute(
            update(Product).where(Product.id == product_id).values(archived_on=archived_on)
        )
        return archived_on

    def get_option_values_for_product(
        self, db: Session, product_id: int
    ) -> Sequence[ProductOptionValue]:
        query = (
            select(ProductOptionValue)
            .join(
                ProductVariantBridge,
                ProductVariantBridge.product_option_value_id == ProductOptionValue.id,
            )
            .where(
                ProductVariantBridge.product_id == product_id,
                ProductVariantBridge.archived_on.is_(None),
            )
            .order_by(ProductVariantBridge.id)
        )
        return db.scalars(query).all()

    # Product variant bridge

    def create_multiple_product_variant_bridges_for_product_id(
        self, db: Session, product_id: int, option_value_ids: Iterable[int]
    ) -> None:
        bridges = [
            ProductVariantBridge(product_id=product_id, product_option_value_id=value_id)
            for value_id in option_value_ids
        ]
        if not bridges:
            return
        db.add_all(bridges)
        db.flush()

    def archive_product_variant_bridges_for_product_id(self, db: Session, product_id: int) -> int:
        stmt = (
            update(ProductVariantBridge)
            .where(
                ProductVariantBridge.product_id == product_id,
                ProductVariantBridge.archived_on.is_(None),
            )
            .values(archived_on=_utcnow())
        )
        return db.execute(stmt).rowcount

    # Webhooks

    def get_webhooks_by_event_type(self, db: Session, event_type: str) -> Sequence[Webhook]:
        query = (
            select(Webhook)
            .where(
                Webhook.event_type == event_type,
                Webhook.enabled.is_(True),
                Webhook.archived_on.is_(None),
            )
            .order_by(Webhook.id)
        )
        return db.scalars(query).all()

    def get_webhook(self, db: Session, webhook_id: int) -> Webhook | None:
        return db.scalar(
            select(Webhook).where(Webhook.id == webhook_id, Webhook.archived_on.is_(None))
        )

    def get_webhook_count(self, db: Session, event_type: str | None = None) -> int:
        query = select(func.count(Webhook.id)).where(Webhook.archived_on.is_(None))
        if event_type is not None:
            query = query.where(Webhook.event_type == event_type)
        return db.scalar(query) or 0

    def get_webhook_list(
        self, db: Session, page: int, limit: int, event_type: str | None = None
    ) -> Sequence[Webhook]:
        query = select(Webhook).where(Webhook.archived_on.is_(None))
        if event_type is not None:
            query = query.where(Webhook.event_type == event_type)
        query = query.order_by(Webhook.id).offset(_page_offset(page, limit)).limit(limit)
        return db.scalars(query).all()

    def create_webhook(self, db: Session, webhook: Webhook) -> tuple[int, datetime]:
        db.add(webhook)
        db.flush()
        return webhook.id, webhook.created_on

    def update_webhook(self, db: Session, webhook: Webhook) -> datetime:
        webhook.updated_on = _utcnow()
        db.flush()
        return webhook.updated_on

    def delete_webhook(self, db: Session, webhook_id: int) -> datetime:
        archived_on = _utcnow()
        db.execute(
            update(Webhook).where(Webhook.id == webhook_id).values(archived_on=archived_on)
        )
        return archived_on

    def create_webhook_execution_log(
        self, db: Session, log: WebhookExecutionLog
    ) -> tuple[int, datetime]:
        db.add(log)
        db.flush()
        return log.id, log.executed_on


def get_storer() -> Storer:
    """FastAPI dependency returning the storage collaborator."""
    return Storer()
