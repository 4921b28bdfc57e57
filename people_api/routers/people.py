from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from people_api.core.request_context import RequestContext, get_request_context
from people_api.services.person_service import Failure, PersonService, person_payload

router = APIRouter(tags=["people"])

_STATUS_BY_KIND = {
    "validation": 422,
    "not_found": 404,
    "database": 503,
    "configuration": 500,
}


class UserIdPayload(BaseModel):
    user_id: str


class AttributePayload(BaseModel):
    value: str | int | float


def _get_person_service(request: Request) -> PersonService:
    svc = getattr(getattr(request.app, "state", None), "person_service", None)
    if not svc:
        raise RuntimeError("PersonService not configured")
    return svc


def _unwrap(result):
    if isinstance(result, Failure):
        raise HTTPException(_STATUS_BY_KIND.get(result.kind, 500), result.message)
    return result.value


@router.get("/environments/{environment_id}/people")
def list_people(environment_id: str, request: Request, ctx: RequestContext = Depends(get_request_context)):
    svc = _get_person_service(request)
    people = _unwrap(svc.list(environment_id, ctx))
    return [person.to_dict() for person in people]


@router.post("/environments/{environment_id}/people", status_code=201)
def create_person(environment_id: str, request: Request):
    svc = _get_person_service(request)
    return person_payload(_unwrap(svc.create(environment_id)))


@router.post("/environments/{environment_id}/people/by-user-id")
def get_or_create_person(environment_id: str, payload: UserIdPayload, request: Request):
    svc = _get_person_service(request)
    return person_payload(_unwrap(svc.get_or_create_by_user_id(payload.user_id, environment_id)))


@router.get("/environments/{environment_id}/people/active-count")
def monthly_active_count(environment_id: str, request: Request):
    svc = _get_person_service(request)
    return {"count": _unwrap(svc.get_monthly_active_count(environment_id))}


@router.get("/people/{person_id}")
def get_person(person_id: str, request: Request):
    svc = _get_person_service(request)
    person = _unwrap(svc.get_cached(person_id))
    if person is None:
        raise HTTPException(404, "Person not found")
    return person_payload(person)


@router.delete("/people/{person_id}", status_code=204)
def delete_person(person_id: str, request: Request):
    svc = _get_person_service(request)
    _unwrap(svc.delete(person_id))
    return Response(status_code=204)


@router.put("/people/{person_id}/attributes/{attribute_class_id}", status_code=204)
def update_person_attribute(person_id: str, attribute_class_id: str, payload: AttributePayload, request: Request):
    svc = _get_person_service(request)
    _unwrap(svc.update_attribute(person_id, attribute_class_id, payload.value))
    return Response(status_code=204)
