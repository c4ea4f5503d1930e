"""Tests for error handling and custom exceptions."""

import pytest
from flask import Flask

from memos_core.exceptions import (
    AuthenticationError,
    DatabaseError,
    MemosError,
    PermissionDenied,
    ResourceNotFound,
    ValidationError,
)
from memos_core.main import (
    handle_authentication_error,
    handle_internal_error,
    handle_memos_error,
    handle_not_found,
    handle_permission_denied,
    handle_validation_error,
)


@pytest.fixture
def error_client():
    """Create a test app with the main app's error handlers and failing routes."""
    test_app = Flask(__name__)
    test_app.config['TESTING'] = True

    test_app.errorhandler(ResourceNotFound)(handle_not_found)
    test_app.errorhandler(ValidationError)(handle_validation_error)
    test_app.errorhandler(AuthenticationError)(handle_authentication_error)
    test_app.errorhandler(PermissionDenied)(handle_permission_denied)
    test_app.errorhandler(MemosError)(handle_memos_error)
    test_app.errorhandler(Exception)(handle_internal_error)

    @test_app.route('/test/not-found')
    def not_found():
        raise ResourceNotFound("Memo not found", details={"uid": "abc"})

    @test_app.route('/test/not-found-no-details')
    def not_found_no_details():
        raise ResourceNotFound("Not found")

    @test_app.route('/test/validation')
    def validation():
        raise ValidationError("Invalid visibility", details={"field": "visibility"})

    @test_app.route('/test/auth')
    def auth():
        raise AuthenticationError("Authentication required")

    @test_app.route('/test/denied')
    def denied():
        raise PermissionDenied("UPDATE on memo is not permitted")

    @test_app.route('/test/database')
    def database():
        raise DatabaseError("Connection failed")

    @test_app.route('/test/internal')
    def internal():
        raise RuntimeError("Something went wrong")

    return test_app.test_client()


class TestExceptions:

    def test_details_default_to_empty_dict(self):
        error = MemosError("boom")
        assert error.message == "boom"
        assert error.details == {}
        assert str(error) == "boom"

    @pytest.mark.parametrize("cls", [
        ResourceNotFound, ValidationError, DatabaseError, AuthenticationError, PermissionDenied
    ])
    def test_hierarchy(self, cls):
        assert issubclass(cls, MemosError)


class TestErrorHandlers:

    @pytest.mark.parametrize("path,status,error_type", [
        ("/test/not-found", 404, "ResourceNotFound"),
        ("/test/validation", 400, "ValidationError"),
        ("/test/auth", 401, "AuthenticationError"),
        ("/test/denied", 403, "PermissionDenied"),
        ("/test/database", 500, "DatabaseError"),
    ])
    def test_status_and_type(self, error_client, path, status, error_type):
        response = error_client.get(path)
        assert response.status_code == status
        assert response.get_json()["error"]["type"] == error_type

    def test_details_included(self, error_client):
        error = error_client.get("/test/not-found").get_json()["error"]
        assert error["message"] == "Memo not found"
        assert error["details"] == {"uid": "abc"}

    def test_details_omitted_when_empty(self, error_client):
        error = error_client.get("/test/not-found-no-details").get_json()["error"]
        assert "details" not in error

    def test_unexpected_error_is_generic(self, error_client):
        response = error_client.get("/test/internal")
        assert response.status_code == 500
        assert response.get_json() == {
            "error": {"type": "InternalServerError", "message": "An internal error occurred"}
        }
