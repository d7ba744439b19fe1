"""Webhook configuration endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dairycart.api.dependencies.db import get_session
from dairycart.api.dependencies.pagination import ListParams, get_list_params
from dairycart.api.errors import internal_issue, invalid_request_body, row_does_not_exist
from dairycart.api.schemas.common import ListResponse
from dairycart.api.schemas.webhook import WebhookCreate, WebhookRead, WebhookUpdate
from dairycart.db.models.webhook import Webhook
from dairycart.db.storer import Storer, get_storer
from dairycart.services.webhook_service import VALID_EVENTS
from dairycart.workers.tasks.webhook_test import webhook_test_task

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_known_event(event_type: str) -> None:
    if event_type not in VALID_EVENTS:
        raise invalid_request_body(
            f"Invalid event type. Must be one of: {', '.join(VALID_EVENTS)}"
        )


def _webhook_page(
    db: Session,
    storer: Storer,
    params: ListParams,
    event_type: str | None = None,
) -> ListResponse[WebhookRead]:
    count = storer.get_webhook_count(db, event_type=event_type)
    webhooks = storer.get_webhook_list(db, params.page, params.limit, event_type=event_type)
    return ListResponse[WebhookRead](
        count=count,
        limit=params.limit,
        page=params.page,
        data=[WebhookRead.model_validate(w) for w in webhooks],
    )


@router.get(
    "/webhooks",
    summary="List registered webhooks",
    response_model=ListResponse[WebhookRead],
)
async def list_webhooks(
    params: ListParams = Depends(get_list_params),
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ListResponse[WebhookRead]:
    try:
        return _webhook_page(db, storer, params)
    except SQLAlchemyError as e:
        raise internal_issue("retrieve webhooks from database", e) from e


@router.get(
    "/webhooks/{event_type}",
    summary="List webhooks subscribed to an event type",
    response_model=ListResponse[WebhookRead],
)
async def list_webhooks_for_event(
    event_type: str,
    params: ListParams = Depends(get_list_params),
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> ListResponse[WebhookRead]:
    try:
        return _webhook_page(db, storer, params, event_type=event_type)
    except SQLAlchemyError as e:
        raise internal_issue("retrieve webhooks from database", e) from e


@router.post(
    "/webhook",
    summary="Create a webhook",
    status_code=status.HTTP_201_CREATED,
    response_model=WebhookRead,
)
async def create_webhook(
    payload: WebhookCreate,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> WebhookRead:
    """Subscribe a URL to one event type. The webhook is enabled by default."""
    try:
        _require_known_event(payload.event_type)

        webhook = Webhook(
            url=str(payload.url),
            event_type=payload.event_type,
            content_type=payload.content_type,
            enabled=payload.enabled,
            secret=payload.secret,
        )
        storer.create_webhook(db, webhook)
        db.commit()
        db.refresh(webhook)

        logger.info(f"Created webhook {webhook.id} for event {payload.event_type}")
        return WebhookRead.model_validate(webhook)

    except HTTPException:
        raise
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error creating webhook: {e}", exc_info=True)
        raise invalid_request_body("Failed to create webhook. Check for duplicate entries.") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue("create webhook in database", e) from e


@router.patch(
    "/webhook/{webhook_id}",
    summary="Update webhook",
    response_model=WebhookRead,
)
async def update_webhook(
    webhook_id: int,
    payload: WebhookUpdate,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> WebhookRead:
    """Only provided fields are updated."""
    try:
        webhook = storer.get_webhook(db, webhook_id)
        if webhook is None:
            raise row_does_not_exist("webhook", webhook_id)

        if payload.event_type is not None:
            _require_known_event(payload.event_type)
            webhook.event_type = payload.event_type
        if payload.url is not None:
            webhook.url = str(payload.url)
        if payload.content_type is not None:
            webhook.content_type = payload.content_type
        if payload.enabled is not None:
            webhook.enabled = payload.enabled
        if payload.secret is not None:
            webhook.secret = payload.secret

        storer.update_webhook(db, webhook)
        db.commit()
        db.refresh(webhook)

        logger.info(f"Updated webhook {webhook_id}")
        return WebhookRead.model_validate(webhook)

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue(f"update webhook {webhook_id} in database", e) from e


@router.delete(
    "/webhook/{webhook_id}",
    summary="Archive webhook",
    response_model=WebhookRead,
)
async def delete_webhook(
    webhook_id: int,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> WebhookRead:
    try:
        webhook = storer.get_webhook(db, webhook_id)
        if webhook is None:
            raise row_does_not_exist("webhook", webhook_id)

        archived_on = storer.delete_webhook(db, webhook_id)
        db.commit()
        db.refresh(webhook)

        logger.info(f"Archived webhook {webhook_id}")
        return WebhookRead.model_validate(webhook).model_copy(update={"archived_on": archived_on})

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise internal_issue(f"archive webhook {webhook_id} in database", e) from e


@router.post(
    "/webhook/{webhook_id}/test",
    summary="Trigger webhook test delivery",
    status_code=status.HTTP_202_ACCEPTED,
)
async def test_webhook(
    webhook_id: int,
    db: Session = Depends(get_session),
    storer: Storer = Depends(get_storer),
) -> dict[str, Any]:
    """Enqueue a test delivery and return immediately with the task ID.

    The delivery outcome is recorded as a webhook execution log.
    """
    try:
        webhook = storer.get_webhook(db, webhook_id)
        if webhook is None:
            raise row_does_not_exist("webhook", webhook_id)

        if not webhook.enabled:
            raise invalid_request_body("Cannot test disabled webhook")

        task = webhook_test_task.delay(webhook_id)

        logger.info(f"Enqueued test task for webhook {webhook_id}, task_id={task.id}")
        return {
            "message": "Webhook test enqueued",
            "task_id": task.id,
            "webhook_id": webhook_id,
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error enqueueing webhook test {webhook_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to enqueue webhook test",
        ) from e
