from django.db import OperationalError
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, ValidationError
from rest_framework.test import APIRequestFactory

from apps.api.exceptions import (
    ApplicationError,
    BadRequestError,
    ConflictError,
    DependencyError,
    ForbiddenError,
    InternalInvariantError,
    NotFoundError,
    global_exception_handler,
)

factory = APIRequestFactory()


class DummyView:
    pass


def _context(request):
    return {"request": request, "view": DummyView()}


def test_application_error_returns_structured_response():
    request = factory.post("/orders/3")
    exc = ApplicationError(
        "CONFLICT",
        "Cart has already been checked out",
        status_code=status.HTTP_409_CONFLICT,
        details={"cartId": "3", "orderId": "11"},
    )
    response = global_exception_handler(exc, _context(request))
    payload = response.data["error"]
    assert response.status_code == status.HTTP_409_CONFLICT
    assert payload["code"] == "CONFLICT"
    assert payload["message"] == "Cart has already been checked out"
    assert payload["details"] == {"cartId": "3", "orderId": "11"}


def test_taxonomy_defaults():
    expected = [
        (BadRequestError, 400, "VALIDATION_ERROR"),
        (NotFoundError, 404, "NOT_FOUND"),
        (ForbiddenError, 403, "FORBIDDEN"),
        (ConflictError, 409, "CONFLICT"),
        (DependencyError, 500, "DEPENDENCY_ERROR"),
        (InternalInvariantError, 500, "INTERNAL_INVARIANT"),
    ]
    for cls, http_status, code in expected:
        error = cls()
        assert error.status_code == http_status
        assert error.code == code
        assert error.to_response().data["error"]["status"] == http_status


def test_domain_error_keeps_message_and_hint():
    error = ConflictError("Cart is locked", details={"cartId": "1"}, hint="Retry later.")
    payload = error.to_response().data["error"]
    assert payload["message"] == "Cart is locked"
    assert payload["hint"] == "Retry later."


def test_validation_error_preserves_details():
    request = factory.post("/carts/1/products", data={})
    exc = ValidationError({"quantity": ["This field is required."]})
    response = global_exception_handler(exc, _context(request))
    payload = response.data["error"]
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["message"] == "Validation failed"
    assert payload["details"] == {"quantity": ["This field is required."]}


def test_not_authenticated_maps_to_unauthorized():
    request = factory.get("/orders")
    response = global_exception_handler(NotAuthenticated(), _context(request))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.data["error"]["code"] == "UNAUTHORIZED"


def test_database_error_becomes_dependency_error():
    request = factory.get("/orders/1")
    response = global_exception_handler(OperationalError("connection refused"), _context(request))
    payload = response.data["error"]
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert payload["code"] == "DEPENDENCY_ERROR"
    assert payload["details"] == {"type": "OperationalError"}


def test_unhandled_exception_returns_generic_message():
    request = factory.get("/products")
    response = global_exception_handler(RuntimeError("boom"), _context(request))
    payload = response.data["error"]
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert payload["code"] == "SERVER_ERROR"
    assert payload["message"] == "Something went wrong"
    assert "details" not in payload
