"""Tests for the product option and option value endpoints."""
import pytest


@pytest.fixture
def root(client, product_payload):
    response = client.post("/v1/product", json=product_payload)
    assert response.status_code == 201
    return response.json()


def test_list_options(client, root):
    response = client.get(f"/v1/product_root/{root['id']}/options")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [v["value"] for v in body["data"][0]["values"]] == ["small", "medium", "large"]


def test_list_options_for_missing_root(client):
    assert client.get("/v1/product_root/42/options").status_code == 404


def test_create_option(client, root):
    response = client.post(
        f"/v1/product_root/{root['id']}/options",
        json={"name": "Fit", "values": ["slim", "regular"]},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Fit"
    assert [v["value"] for v in body["values"]] == ["slim", "regular"]
    # existing variants are not regenerated
    assert client.get("/v1/products").json()["count"] == 9


def test_create_option_with_taken_name(client, root):
    response = client.post(
        f"/v1/product_root/{root['id']}/options",
        json={"name": "Size", "values": ["tiny"]},
    )

    assert response.status_code == 400
    assert "already exists" in response.json()["message"]


def test_create_option_for_missing_root(client):
    response = client.post(
        "/v1/product_root/42/options", json={"name": "Fit", "values": ["slim"]}
    )

    assert response.status_code == 404


def test_rename_option(client, root):
    option_id = root["options"][0]["id"]

    response = client.patch(f"/v1/product_options/{option_id}", json={"name": "Length"})

    assert response.status_code == 200
    assert response.json()["name"] == "Length"
    assert response.json()["updated_on"] is not None


def test_delete_option_archives_values(client, root):
    option = root["options"][1]

    response = client.delete(f"/v1/product_options/{option['id']}")

    assert response.status_code == 200
    assert response.json()["archived_on"] is not None
    options = client.get(f"/v1/product_root/{root['id']}/options").json()
    assert [o["name"] for o in options["data"]] == ["Size"]
    value_id = option["values"][0]["id"]
    assert client.delete(f"/v1/product_option_values/{value_id}").status_code == 404


def test_add_value_to_option(client, root):
    option_id = root["options"][0]["id"]

    response = client.post(f"/v1/product_options/{option_id}/value", json={"value": "xl"})

    assert response.status_code == 201
    assert response.json()["value"] == "xl"
    assert response.json()["product_option_id"] == option_id


def test_add_existing_value_to_option(client, root):
    option_id = root["options"][0]["id"]

    response = client.post(f"/v1/product_options/{option_id}/value", json={"value": "small"})

    assert response.status_code == 400


def test_add_value_differing_only_in_case(client, root):
    option_id = root["options"][0]["id"]

    response = client.post(f"/v1/product_options/{option_id}/value", json={"value": "Small"})

    assert response.status_code == 400
    option = client.get(f"/v1/product_root/{root['id']}/options").json()["data"][0]
    assert [v["value"] for v in option["values"]] == ["small", "medium", "large"]


def test_create_option_rejects_long_value(client, root):
    response = client.post(
        f"/v1/product_root/{root['id']}/options",
        json={"name": "Fit", "values": ["slim", "x" * 80]},
    )

    assert response.status_code == 400
    assert client.get(f"/v1/product_root/{root['id']}/options").json()["count"] == 2


def test_add_value_to_missing_option(client):
    response = client.post("/v1/product_options/42/value", json={"value": "xl"})

    assert response.status_code == 404
    assert response.json()["message"] == (
        "The product option you were looking for (id '42') does not exist"
    )


def test_update_option_value(client, root):
    value_id = root["options"][0]["values"][0]["id"]

    response = client.patch(f"/v1/product_option_values/{value_id}", json={"value": "petite"})

    assert response.status_code == 200
    assert response.json()["value"] == "petite"


def test_update_option_value_to_existing_value(client, root):
    value_id = root["options"][0]["values"][0]["id"]

    response = client.patch(f"/v1/product_option_values/{value_id}", json={"value": "large"})

    assert response.status_code == 400


def test_update_option_value_to_existing_value_in_other_case(client, root):
    value_id = root["options"][0]["values"][0]["id"]

    response = client.patch(f"/v1/product_option_values/{value_id}", json={"value": "Medium"})

    assert response.status_code == 400


def test_update_option_value_case_only(client, root):
    value_id = root["options"][0]["values"][0]["id"]

    response = client.patch(f"/v1/product_option_values/{value_id}", json={"value": "Small"})

    assert response.status_code == 200
    assert response.json()["value"] == "Small"


def test_delete_option_value(client, root):
    value_id = root["options"][0]["values"][2]["id"]

    response = client.delete(f"/v1/product_option_values/{value_id}")

    assert response.status_code == 200
    assert response.json()["archived_on"] is not None
    option = client.get(f"/v1/product_root/{root['id']}/options").json()["data"][0]
    assert [v["value"] for v in option["values"]] == ["small", "medium"]
