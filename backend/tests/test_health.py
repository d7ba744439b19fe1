"""Tests for the health endpoints."""


def test_liveness(client):
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "dairycart-api"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v1/nothing-here")

    assert response.status_code == 404
    assert response.json()["status"] == 404
