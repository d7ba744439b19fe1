"""Tests for the webhook configuration endpoints."""
from unittest.mock import MagicMock

import pytest

from dairycart.api.routers import webhooks as webhooks_router

HOOK_URL = "https://hooks.example.com/products"


@pytest.fixture
def webhook(client):
    response = client.post(
        "/v1/webhook",
        json={"url": HOOK_URL, "event_type": "product_created", "secret": "s3cret"},
    )
    assert response.status_code == 201
    return response.json()


def test_create_webhook(webhook):
    assert webhook["url"] == HOOK_URL
    assert webhook["event_type"] == "product_created"
    assert webhook["content_type"] == "application/json"
    assert webhook["enabled"] is True
    assert "secret" not in webhook


def test_create_webhook_for_unknown_event(client):
    response = client.post("/v1/webhook", json={"url": HOOK_URL, "event_type": "order_placed"})

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid event type")


def test_create_webhook_with_bad_url(client):
    response = client.post("/v1/webhook", json={"url": "not a url", "event_type": "product_created"})

    assert response.status_code == 400


def test_list_webhooks(client, webhook):
    client.post("/v1/webhook", json={"url": HOOK_URL, "event_type": "product_archived"})

    everything = client.get("/v1/webhooks").json()
    archived_only = client.get("/v1/webhooks/product_archived").json()

    assert everything["count"] == 2
    assert archived_only["count"] == 1
    assert archived_only["data"][0]["event_type"] == "product_archived"


def test_update_webhook(client, webhook):
    response = client.patch(f"/v1/webhook/{webhook['id']}", json={"enabled": False})

    assert response.status_code == 200
    assert response.json()["enabled"] is False
    assert response.json()["url"] == HOOK_URL


def test_update_webhook_with_unknown_event(client, webhook):
    response = client.patch(f"/v1/webhook/{webhook['id']}", json={"event_type": "nope"})

    assert response.status_code == 400


def test_delete_webhook(client, webhook):
    response = client.delete(f"/v1/webhook/{webhook['id']}")

    assert response.status_code == 200
    assert response.json()["archived_on"] is not None
    assert client.get("/v1/webhooks").json()["count"] == 0
    assert client.delete(f"/v1/webhook/{webhook['id']}").status_code == 404


def test_disabled_webhook_is_not_notified(client, webhook_task, webhook, product_payload):
    client.patch(f"/v1/webhook/{webhook['id']}", json={"enabled": False})

    assert client.post("/v1/product", json=product_payload).status_code == 201

    webhook_task.delay.assert_not_called()


def test_archival_notifies_subscribers(client, webhook_task, product_payload):
    client.post("/v1/webhook", json={"url": HOOK_URL, "event_type": "product_archived"})
    client.post("/v1/product", json=product_payload)

    client.delete("/v1/product/t-shirt_small_red")

    webhook_task.delay.assert_called_once()
    _, payload = webhook_task.delay.call_args.args
    assert payload["event"] == "product_archived"
    assert payload["data"]["sku"] == "t-shirt_small_red"


def test_enqueue_test_delivery(client, monkeypatch, webhook):
    task = MagicMock()
    task.delay.return_value.id = "task-123"
    monkeypatch.setattr(webhooks_router, "webhook_test_task", task)

    response = client.post(f"/v1/webhook/{webhook['id']}/test")

    assert response.status_code == 202
    assert response.json()["task_id"] == "task-123"
    task.delay.assert_called_once_with(webhook["id"])


def test_test_delivery_for_disabled_webhook(client, monkeypatch, webhook):
    task = MagicMock()
    monkeypatch.setattr(webhooks_router, "webhook_test_task", task)
    client.patch(f"/v1/webhook/{webhook['id']}", json={"enabled": False})

    response = client.post(f"/v1/webhook/{webhook['id']}/test")

    assert response.status_code == 400
    task.delay.assert_not_called()
