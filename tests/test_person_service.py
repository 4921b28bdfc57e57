from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from people_api.app import create_app
from people_api.core.cache import TagCache
from people_api.domain import errors
from people_api.domain.ids import new_id
from people_api.repositories.person_repository import PersonRepository
from people_api.routers.people import _STATUS_BY_KIND
from people_api.services.person_service import FAILURE_KINDS, Failure, Ok, PersonService


@pytest.fixture()
def svc(repo) -> PersonService:
    return PersonService(repo)


def test_success_is_wrapped_in_ok(svc, environment):
    result = svc.create(environment.id)
    assert isinstance(result, Ok)
    assert result.ok is True

    fetched = svc.get(result.value.id)
    assert isinstance(fetched, Ok)
    assert fetched.value.id == result.value.id


def test_absent_person_is_ok_none(svc):
    result = svc.get(new_id())
    assert result == Ok(None)


def test_validation_failure(svc):
    result = svc.delete("Not An Id")
    assert isinstance(result, Failure)
    assert result.ok is False
    assert result.kind == "validation"


def test_database_failure(svc):
    result = svc.delete(new_id())
    assert result == Failure("database", "Database operation failed")


def test_configuration_failure(svc, environment):
    result = svc.get_or_create_by_user_id("abc", environment.id)
    assert isinstance(result, Failure)
    assert result.kind == "configuration"


def test_find_or_create_example(svc, environment, user_id_class):
    first = svc.get_or_create_by_user_id("abc", environment.id)
    second = svc.get_or_create_by_user_id("abc", environment.id)
    assert first.value.attributes == {"userId": "abc"}
    assert second.value.id == first.value.id


def test_update_attribute_and_count(svc, sql_repo, environment):
    plan = sql_repo.create_attribute_class(environment.id, "plan")
    person = svc.create(environment.id).value

    assert svc.update_attribute(person.id, plan.id, "pro") == Ok(None)
    assert svc.get_cached(person.id).value.attributes == {"plan": "pro"}
    assert svc.list(environment.id).value[0].id == person.id
    assert svc.get_monthly_active_count(environment.id) == Ok(0)


def test_unclassified_errors_still_raise(cache, sql_repo):
    def broken_session():
        raise KeyError("boom")

    svc = PersonService(PersonRepository(cache, sql_repo, session_factory=broken_session))
    with pytest.raises(KeyError):
        svc.get(new_id())


class _NullCollectionSession:
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, _stmt):
        return self

    def scalars(self):
        return self

    def all(self):
        return None


def test_null_collection_is_not_found_failure(cache, sql_repo):
    svc = PersonService(PersonRepository(cache, sql_repo, session_factory=_NullCollectionSession))
    result = svc.list(new_id())
    assert result == Failure("not_found", "Persons with ID All Persons not found")


def test_not_found_failure_maps_to_404(temp_db, sql_repo):
    app = create_app(cache=TagCache(max_size=10))
    repo = PersonRepository(TagCache(max_size=10), sql_repo, session_factory=_NullCollectionSession)
    app.state.person_service = PersonService(repo)
    with TestClient(app) as client:
        resp = client.get(f"/environments/{new_id()}/people")
    assert resp.status_code == 404


def test_every_error_kind_is_a_known_failure_kind():
    kinds = {
        errors.ValidationError.kind,
        errors.DatabaseError.kind,
        errors.ResourceNotFoundError.kind,
        errors.ConfigurationError.kind,
    }
    assert kinds == set(FAILURE_KINDS)
    assert set(_STATUS_BY_KIND) == set(FAILURE_KINDS)
