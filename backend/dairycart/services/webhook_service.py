"""Service for triggering webhooks on product events."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from dairycart.core.config import get_settings
from dairycart.db.session import get_fresh_session
from dairycart.db.storer import Storer
from dairycart.services.webhook_dispatch import dispatch_event
from dairycart.workers.tasks.webhook_dispatch_async import dispatch_webhook_async

logger = logging.getLogger(__name__)

PRODUCT_CREATED_EVENT = "product_created"
PRODUCT_UPDATED_EVENT = "product_updated"
PRODUCT_ARCHIVED_EVENT = "product_archived"

VALID_EVENTS = [
    PRODUCT_CREATED_EVENT,
    PRODUCT_UPDATED_EVENT,
    PRODUCT_ARCHIVED_EVENT,
]


def trigger_webhooks(
    event_type: str,
    payload: dict[str, Any],
    db: Session | None = None,
    async_dispatch: bool | None = None,
    storer: Storer | None = None,
) -> int:
    """Trigger all enabled webhooks for a given event type.

    Runs after the triggering change has been committed. Failures are logged
    and never raised, so they cannot affect the operation that fired the event.

    Args:
        event_type: Event type (e.g., "product_created")
        payload: Event payload to send
        db: Database session; a fresh one is opened and closed if omitted
        async_dispatch: If True, dispatch via Celery task (non-blocking).
                        Defaults to the ``webhook_async_dispatch`` setting.
        storer: Storage collaborator used to look up webhooks

    Returns:
        Number of webhooks a delivery was started for
    """
    if async_dispatch is None:
        async_dispatch = get_settings().webhook_async_dispatch
    storer = storer or Storer()
    owns_session = db is None
    session = db if db is not None else get_fresh_session()

    triggered = 0
    try:
        webhooks = storer.get_webhooks_by_event_type(session, event_type)
        if not webhooks:
            logger.debug(f"No enabled webhooks found for event {event_type}")
            return 0

        logger.info(f"Triggering {len(webhooks)} webhook(s) for event {event_type}")

        for webhook in webhooks:
            try:
                if async_dispatch:
                    dispatch_webhook_async.delay(webhook.id, payload)
                    logger.debug(f"Enqueued async webhook {webhook.id} for event {event_type}")
                else:
                    result = dispatch_event(webhook, payload, session, storer=storer)
                    if not result.get("success"):
                        logger.warning(
                            f"Webhook {webhook.id} delivery failed: {result.get('error')}"
                        )
                triggered += 1
            except Exception as e:
                logger.error(
                    f"Error triggering webhook {webhook.id} for event {event_type}: {e}",
                    exc_info=True,
                )
                continue

    except Exception as e:
        logger.error(
            f"Unexpected error triggering webhooks for event {event_type}: {e}",
            exc_info=True,
        )
    finally:
        if owns_session:
            session.close()

    return triggered
