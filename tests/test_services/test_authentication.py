"""
Tests for the AuthenticationService.
"""

import base64

import pytest

from services.authentication import AuthenticationService
from storage.repositories import UserRepository


def basic_header(email: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{email}:{password}".encode("utf-8")).decode("ascii")


@pytest.fixture
def auth(data_manager) -> AuthenticationService:
    return AuthenticationService(UserRepository(data_manager))


class TestUserManagement:
    """Tests for user CRUD."""

    def test_register_user(self, auth: AuthenticationService):
        user = auth.register_user("ann@store.com", "secret", "Ann")

        assert user.email == "ann@store.com"
        assert auth.user_exists("ann@store.com")
        assert len(auth.get_all_users()) == 3

    def test_register_existing_returns_none(self, auth: AuthenticationService):
        assert auth.register_user("admin@store.com", "x", "Impostor") is None
        assert auth.get_user_by_email("admin@store.com").name == "Admin User"

    def test_update_user(self, auth: AuthenticationService):
        user = auth.update_user("user@store.com", name="Renamed")

        assert user.name == "Renamed"
        assert user.password == "user123"

    def test_update_missing_user(self, auth: AuthenticationService):
        assert auth.update_user("ghost@store.com", password="x") is None

    def test_delete_user(self, auth: AuthenticationService):
        assert auth.delete_user("user@store.com") is True
        assert auth.delete_user("user@store.com") is False


class TestBasicAuthentication:
    """Tests for HTTP Basic credential checks."""

    def test_valid_credentials(self, auth: AuthenticationService):
        user = auth.authenticate_basic(basic_header("admin@store.com", "admin123"))
        assert user is not None
        assert user.email == "admin@store.com"

    def test_wrong_password(self, auth: AuthenticationService):
        assert auth.authenticate_basic(basic_header("admin@store.com", "nope")) is None

    @pytest.mark.parametrize("header", [None, "", "Bearer abc", "Basic !!!notbase64", "Basic " + base64.b64encode(b"nocolon").decode()])
    def test_malformed_header(self, auth: AuthenticationService, header):
        assert auth.authenticate_basic(header) is None
