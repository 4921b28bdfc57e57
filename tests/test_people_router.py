from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from people_api.app import create_app
from people_api.core.cache import TagCache
from people_api.domain.ids import new_id


@pytest.fixture()
def client(temp_db):
    app = create_app(cache=TagCache(max_size=100))
    with TestClient(app) as test_client:
        yield test_client


def test_create_list_and_delete(client, environment):
    created = client.post(f"/environments/{environment.id}/people")
    assert created.status_code == 201
    person = created.json()
    assert person["attributes"] == {}
    assert person["environment_id"] == environment.id

    listed = client.get(f"/environments/{environment.id}/people")
    assert listed.status_code == 200
    assert [p["id"] for p in listed.json()] == [person["id"]]

    assert client.get(f"/people/{person['id']}").status_code == 200
    assert client.delete(f"/people/{person['id']}").status_code == 204
    assert client.get(f"/people/{person['id']}").status_code == 404


def test_find_or_create_and_update_attribute(client, sql_repo, environment, user_id_class):
    plan = sql_repo.create_attribute_class(environment.id, "plan")
    url = f"/environments/{environment.id}/people/by-user-id"

    first = client.post(url, json={"user_id": "abc"}).json()
    second = client.post(url, json={"user_id": "abc"}).json()
    assert first["id"] == second["id"]
    assert first["attributes"] == {"userId": "abc"}

    client.get(f"/people/{first['id']}")  # warm the cache
    resp = client.put(f"/people/{first['id']}/attributes/{plan.id}", json={"value": "pro"})
    assert resp.status_code == 204
    assert client.get(f"/people/{first['id']}").json()["attributes"] == {"userId": "abc", "plan": "pro"}


def test_error_kinds_map_to_status_codes(client, environment):
    assert client.post("/environments/NOT-AN-ID/people").status_code == 422
    assert client.delete(f"/people/{new_id()}").status_code == 503
    missing_class = client.post(f"/environments/{environment.id}/people/by-user-id", json={"user_id": "abc"})
    assert missing_class.status_code == 500


def test_active_count(client, environment):
    resp = client.get(f"/environments/{environment.id}/people/active-count")
    assert resp.status_code == 200
    assert resp.json() == {"count": 0}
