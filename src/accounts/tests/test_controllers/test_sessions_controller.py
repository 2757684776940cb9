# src/accounts/tests/test_controllers/test_sessions_controller.py
"""test_sessions_controller.py: Integration tests for SessionController."""

import typing as t

import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import AdminUser
from accounts.schema import LoginResponseSchema
from accounts.service import auth as auth_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def second_login(admin_user: AdminUser, login_request: t.Any) -> LoginResponseSchema:
    """Another device logged in as the same admin."""
    return auth_service.issue_login(admin_user, login_request)


def _bearer(login: LoginResponseSchema) -> dict[str, str]:
    return {"HTTP_AUTHORIZATION": f"Bearer {login.token}"}


def test_list_sessions_flags_the_current_one(
    auth_client: Client, admin_login: LoginResponseSchema, second_login: LoginResponseSchema
) -> None:
    response = auth_client.get(reverse("api:list_sessions"))

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    current = [s for s in data if s["is_current"]]
    assert [s["session_id"] for s in current] == [admin_login.session.session_id]
    assert all("token" not in s for s in data)
    assert data[0]["location"]["city"] == "Lagos"


def test_count_sessions(auth_client: Client, second_login: LoginResponseSchema) -> None:
    response = auth_client.get(reverse("api:count_sessions"))

    assert response.status_code == 200
    assert response.json() == {"active_sessions": 2}


def test_revoke_current_session(
    auth_client: Client, client: Client, second_login: LoginResponseSchema
) -> None:
    response = auth_client.delete(reverse("api:revoke_current_session"))

    assert response.status_code == 200
    assert response.json() == {"message": "Session revoked."}
    assert auth_client.get(reverse("api:count_sessions")).status_code == 401
    response = client.get(reverse("api:count_sessions"), **_bearer(second_login))
    assert response.json() == {"active_sessions": 1}


def test_revoke_other_sessions(
    auth_client: Client, client: Client, admin_login: LoginResponseSchema, second_login: LoginResponseSchema
) -> None:
    # The second device has been seen, so its token is in the verified-token cache.
    assert client.get(reverse("api:count_sessions"), **_bearer(second_login)).status_code == 200

    response = auth_client.delete(reverse("api:revoke_other_sessions"))

    assert response.status_code == 200
    assert response.json() == {"message": "Other sessions revoked.", "revoked": 1}
    assert client.get(reverse("api:count_sessions"), **_bearer(second_login)).status_code == 401
    assert auth_client.get(reverse("api:count_sessions")).json() == {"active_sessions": 1}


def test_revoke_all_sessions(
    auth_client: Client, client: Client, second_login: LoginResponseSchema
) -> None:
    response = auth_client.delete(reverse("api:revoke_all_sessions"))

    assert response.status_code == 200
    assert response.json() == {"message": "All sessions revoked.", "revoked": 2}
    assert auth_client.get(reverse("api:list_sessions")).status_code == 401
    assert client.get(reverse("api:list_sessions"), **_bearer(second_login)).status_code == 401


def test_revoke_session_by_id(
    auth_client: Client, client: Client, second_login: LoginResponseSchema
) -> None:
    url = reverse("api:revoke_session", kwargs={"session_id": second_login.session.session_id})

    response = auth_client.delete(url)

    assert response.status_code == 200
    assert response.json() == {"message": "Session revoked."}
    assert client.get(reverse("api:count_sessions"), **_bearer(second_login)).status_code == 401


def test_revoke_unknown_session(auth_client: Client) -> None:
    url = reverse("api:revoke_session", kwargs={"session_id": "session:unknown:0:0"})

    response = auth_client.delete(url)

    assert response.status_code == 404
    assert response.json()["detail"] == "Session not found."


def test_sessions_require_a_token(client: Client) -> None:
    response = client.get(reverse("api:list_sessions"))

    assert response.status_code == 401
    assert response.json()["detail"] == "Access token is required."


def test_malformed_token_is_rejected(client: Client) -> None:
    response = client.get(reverse("api:list_sessions"), HTTP_AUTHORIZATION="Bearer not-a-jwt")

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token."
