import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.exceptions import flatten_errors


@pytest.mark.django_db
def test_health_reports_ok():
    response = APIClient().get("/health/")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["error"] is None
    assert body["data"]["status"] == "ok"
    assert "timestamp" in body


@pytest.mark.django_db
def test_unknown_route_returns_error_envelope():
    response = APIClient().get("/api/nowhere/")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["statusCode"] == 404


@pytest.mark.django_db
def test_validation_errors_are_422_with_field_list():
    response = APIClient().post("/api/auth/register/", {"email": "not-an-email"}, format="json")

    assert response.status_code == 422
    body = response.json()
    fields = {entry["field"] for entry in body["error"]["errors"]}
    assert {"email", "password", "full_name"} <= fields


@pytest.mark.django_db
def test_missing_token_is_401(trip):
    response = APIClient().get("/api/bookings/")

    assert response.status_code == 401
    assert response.json()["error"]["statusCode"] == 401


@pytest.mark.django_db
def test_paginated_lists_carry_pagination_block(trip):
    response = APIClient().get("/api/trips/", {"limit": 5})

    assert response.status_code == 200
    pagination = response.json()["pagination"]
    assert pagination == {
        "currentPage": 1,
        "totalPages": 1,
        "totalItems": 1,
        "itemsPerPage": 5,
        "hasNextPage": False,
        "hasPrevPage": False,
    }


@pytest.mark.django_db
def test_requests_over_the_window_limit_get_429(settings):
    settings.RATE_LIMIT_MAX_REQUESTS = 2
    cache.clear()
    client = APIClient()

    assert client.get("/api/trips/").status_code == 200
    assert client.get("/api/trips/").status_code == 200
    response = client.get("/api/trips/")

    assert response.status_code == 429
    assert response.json()["error"]["statusCode"] == 429
    assert "Retry-After" in response
    cache.clear()


def test_flatten_errors_walks_nested_details():
    detail = {"travelers": [{"full_name": ["This field is required."]}], "email": ["Enter a valid email address."]}

    assert flatten_errors(detail) == [
        {"field": "travelers[0].full_name", "message": "This field is required."},
        {"field": "email", "message": "Enter a valid email address."},
    ]
