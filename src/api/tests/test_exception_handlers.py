"""Tests for the API exception handlers."""

import orjson
from django.core.exceptions import ValidationError
from django.test import RequestFactory

from api.exception_handlers import (
    handle_django_validation_error,
    handle_general_exception,
    handle_service_error,
    obfuscate,
)
from common.exceptions import ConflictError, NotFoundError


def test_service_error_carries_its_status(rf: RequestFactory) -> None:
    response = handle_service_error(rf.get("/api/x"), NotFoundError("Session not found."))

    assert response.status_code == 404
    assert orjson.loads(response.content) == {"detail": "Session not found."}


def test_service_error_default_detail(rf: RequestFactory) -> None:
    response = handle_service_error(rf.get("/api/x"), ConflictError())

    assert response.status_code == 409
    assert orjson.loads(response.content) == {"detail": "Conflict."}


def test_django_validation_error_with_fields(rf: RequestFactory) -> None:
    exc = ValidationError({"end": ["The event cannot end before it starts."]})

    response = handle_django_validation_error(rf.post("/api/x"), exc)

    assert response.status_code == 400
    assert b"The event cannot end before it starts." in response.content


def test_django_validation_error_without_fields(rf: RequestFactory) -> None:
    response = handle_django_validation_error(rf.post("/api/x"), ValidationError("Broken."))

    assert response.status_code == 400
    assert b"__all__" in response.content


def test_unexpected_error_is_a_500(rf: RequestFactory) -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError as exc:
        response = handle_general_exception(rf.get("/api/x", HTTP_AUTHORIZATION="Bearer secret"), exc)

    assert response.status_code == 500
    assert b"Internal Server Error." in response.content
    assert b"boom" not in response.content


def test_obfuscate() -> None:
    data = {"Authorization": "Bearer abc", "otp": "123456", "email": "a@example.com"}

    assert obfuscate(data) == {"Authorization": "********", "otp": "********", "email": "a@example.com"}
