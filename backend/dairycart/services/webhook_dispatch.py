"""Deliver webhook payloads and record each attempt."""

from __future__ import annotations

from datetime import datetime, timezone
import hashlib
import hmac
import json
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dairycart.core.config import get_settings
from dairycart.db.models.webhook import Webhook, WebhookExecutionLog
from dairycart.db.storer import Storer

logger = logging.getLogger(__name__)

USER_AGENT = "Dairycart-Webhooks/1.0"
EVENT_HEADER = "X-Dairycart-Event"
SIGNATURE_HEADER = "X-Webhook-Signature"
ERROR_BODY_PREVIEW = 200


def build_event_payload(event_type: str, data: BaseModel | dict[str, Any]) -> dict[str, Any]:
    """Wrap an object in the envelope every webhook receives.

    Args:
        event_type: Event type (product_created, product_updated, product_archived)
        data: Object the event is about

    Returns:
        JSON-serializable dictionary with event, timestamp and data keys
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return {
        "event": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def _sign_payload(payload: dict, secret: str) -> str:
    """HMAC-SHA256 of the payload serialized with sorted keys."""
    body = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def build_headers(webhook: Webhook, payload: dict[str, Any]) -> dict[str, str]:
    headers = {
        "Content-Type": webhook.content_type or "application/json",
        "User-Agent": USER_AGENT,
        EVENT_HEADER: str(payload.get("event", "")),
    }
    if webhook.secret:
        headers[SIGNATURE_HEADER] = f"sha256={_sign_payload(payload, webhook.secret)}"
    return headers


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def dispatch_event(
    webhook: Webhook,
    payload: dict[str, Any],
    db: Session | None = None,
    client: httpx.Client | None = None,
    storer: Storer | None = None,
) -> dict[str, Any]:
    """POST ``payload`` to the webhook URL and report what happened.

    Delivery errors never propagate; they are folded into the result.

    Args:
        webhook: Subscriber to deliver to
        payload: Event envelope from ``build_event_payload``
        db: When given, the attempt is stored as a ``WebhookExecutionLog``
        client: HTTP client to send with; a short-lived one is opened if omitted
        storer: Storage collaborator used to record the attempt

    Returns:
        ``{"status", "response_time_ms", "success", "error"}`` where status is
        the HTTP status code, ``"timeout"`` or ``"error"``
    """
    timeout = get_settings().webhook_timeout_seconds
    headers = build_headers(webhook, payload)
    body = json.dumps(payload)
    started = time.perf_counter()
    result: dict[str, Any] = {
        "status": None,
        "response_time_ms": None,
        "success": False,
        "error": None,
    }

    try:
        if client is None:
            with httpx.Client(timeout=timeout, follow_redirects=True) as owned:
                response = owned.post(webhook.url, content=body, headers=headers)
        else:
            response = client.post(webhook.url, content=body, headers=headers)
    except httpx.TimeoutException as e:
        result.update(status="timeout", error=f"Request timeout after {timeout}s")
        logger.warning(f"Webhook {webhook.id} timed out: {e}")
    except httpx.RequestError as e:
        result.update(status="error", error=f"Request failed: {e}")
        logger.error(f"Webhook {webhook.id} request error: {e}", exc_info=True)
    else:
        result["status"] = response.status_code
        result["success"] = response.is_success
        if not response.is_success:
            result["error"] = f"HTTP {response.status_code}: {response.text[:ERROR_BODY_PREVIEW]}"
    result["response_time_ms"] = _elapsed_ms(started)

    logger.info(
        f"Webhook {webhook.id} ({payload.get('event')}) -> {webhook.url}: "
        f"status={result['status']}, time={result['response_time_ms']}ms"
    )

    if db is not None:
        try:
            record_delivery(webhook, result, db, storer=storer)
        except SQLAlchemyError as e:
            logger.warning(f"Delivery to webhook {webhook.id} was not recorded: {e}")

    return result


def record_delivery(
    webhook: Webhook,
    result: dict[str, Any],
    db: Session,
    storer: Storer | None = None,
) -> WebhookExecutionLog:
    """Store one execution log row for a delivery attempt and commit it."""
    storer = storer or Storer()
    status = result.get("status")
    log = WebhookExecutionLog(
        webhook_id=webhook.id,
        status_code=status if isinstance(status, int) else None,
        succeeded=bool(result.get("success")),
        response_time_ms=result.get("response_time_ms"),
        error=result.get("error"),
    )
    try:
        storer.create_webhook_execution_log(db, log)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not record delivery for webhook {webhook.id}: {e}", exc_info=True)
        raise
    return log
