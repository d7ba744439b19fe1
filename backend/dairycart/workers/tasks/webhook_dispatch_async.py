"""Celery task delivering one product event to one subscriber."""

from __future__ import annotations

import logging
from typing import Any

from dairycart.db.session import get_fresh_session
from dairycart.db.storer import Storer
from dairycart.services.webhook_dispatch import dispatch_event
from dairycart.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def _skipped(reason: str) -> dict[str, Any]:
    return {"success": False, "error": reason}


@celery_app.task(bind=True, name="dairycart.workers.tasks.webhook_dispatch_async")
def dispatch_webhook_async(self, webhook_id: int, payload: dict[str, Any]) -> dict[str, Any]:
    """Deliver ``payload`` to the webhook with ``webhook_id``.

    The webhook is looked up again when the task runs, so a subscriber
    archived or disabled after the event was queued receives nothing.
    """
    session = get_fresh_session()
    storer = Storer()
    event = payload.get("event")
    try:
        webhook = storer.get_webhook(session, webhook_id)
        if webhook is None:
            logger.warning(f"Dropping {event} for webhook {webhook_id}: no longer registered")
            return _skipped("Webhook not found")
        if not webhook.enabled:
            logger.info(f"Dropping {event} for webhook {webhook_id}: disabled")
            return _skipped("Webhook is disabled")

        return dispatch_event(webhook, payload, session, storer=storer)

    except Exception as e:
        logger.error(f"Delivering {event} to webhook {webhook_id} failed: {e}", exc_info=True)
        return _skipped(str(e))
    finally:
        session.close()
