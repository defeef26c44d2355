import json
from uuid import uuid4

from fastapi import FastAPI
from pymongo.errors import DuplicateKeyError
from starlette.requests import Request

from wayfarer_app.core.exceptions_handler.global_exception_handler import global_exception_handler
from wayfarer_app.core.exceptions_handler.validation_exception_handler import duplicate_key_exception_handler


def body(response):
    return json.loads(response.body)


async def test_not_found_uses_error_shape(make_user, client_as):
    user = await make_user()

    async with client_as(user) as client:
        response = await client.get(f"/api/v1/stories/{uuid4()}")

    assert response.status_code == 404
    payload = response.json()
    assert payload["code"] == 404
    assert payload["message"] == "Story not found"
    assert payload["errorMessages"] == [{"path": "", "message": "Story not found"}]


async def test_schema_errors_map_to_400_with_field_paths(make_user, client_as):
    user = await make_user()

    async with client_as(user) as client:
        response = await client.post("/api/v1/stories/", json={"duration_hours": -1})

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == 400
    assert [e["path"] for e in payload["errorMessages"]] == ["duration_hours"]


async def test_duplicate_key_maps_to_409():
    error = DuplicateKeyError("E11000 duplicate key", 11000, {"keyValue": {"email": "a@example.com"}})

    response = await duplicate_key_exception_handler(None, error)

    assert response.status_code == 409
    assert body(response)["errorMessages"] == [{"path": "email", "message": "email already exists"}]


def _request(debug):
    return Request({"type": "http", "method": "GET", "path": "/boom", "app": FastAPI(debug=debug), "headers": []})


async def test_unexpected_errors_hide_details_outside_debug():
    hidden = body(await global_exception_handler(_request(False), RuntimeError("boom")))
    shown = body(await global_exception_handler(_request(True), RuntimeError("boom")))

    assert hidden["code"] == 500
    assert hidden["error_details"] is None
    assert shown["error_details"] == "boom"
