# src/accounts/tests/test_controllers/test_auth_controller.py
"""test_auth_controller.py: Integration tests for AuthController."""

import typing as t
from datetime import timedelta

import orjson
import pytest
from django.core import mail
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client
from django.utils import timezone
from freezegun import freeze_time
from pytest import MonkeyPatch

from accounts.models import AdminUser
from accounts.schema import LoginResponseSchema
from conftest import ADMIN_PASSWORD, BROWSER_USER_AGENT

pytestmark = pytest.mark.django_db


def _post(client: Client, url_name: str, payload: dict[str, str], **extra: str) -> t.Any:
    return client.post(reverse(f"api:{url_name}"), data=orjson.dumps(payload), content_type="application/json", **extra)


# --- Account creation ---


def test_create_account(client: Client) -> None:
    payload = {
        "full_name": "Chioma Eze",
        "brand_name": "Eze Concerts",
        "email": "Chioma@Example.com",
        "password": ADMIN_PASSWORD,
        "confirm_password": ADMIN_PASSWORD,
        "phone_number": "+2348031234567",
    }

    response = _post(client, "create_account", payload)

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "chioma@example.com"
    assert data["brand_name"] == "Eze Concerts"
    assert "password" not in data
    assert AdminUser.objects.get(email="chioma@example.com").check_password(ADMIN_PASSWORD)


def test_create_account_duplicate_email(client: Client, admin_user: AdminUser) -> None:
    payload = {
        "full_name": "Someone Else",
        "brand_name": "Copycat",
        "email": admin_user.email.upper(),
        "password": ADMIN_PASSWORD,
        "confirm_password": ADMIN_PASSWORD,
        "phone_number": "+2348031234567",
    }

    response = _post(client, "create_account", payload)

    assert response.status_code == 409
    assert response.json()["detail"] == "An account with this email already exists."


def test_create_account_password_mismatch(client: Client) -> None:
    payload = {
        "full_name": "Chioma Eze",
        "brand_name": "Eze Concerts",
        "email": "chioma@example.com",
        "password": ADMIN_PASSWORD,
        "confirm_password": "another-password-1",
        "phone_number": "+2348031234567",
    }

    response = _post(client, "create_account", payload)

    assert response.status_code == 422
    assert not AdminUser.objects.filter(email="chioma@example.com").exists()


# --- Login with OTP ---


def test_full_login_flow(client: Client, admin_user: AdminUser, monkeypatch: MonkeyPatch) -> None:
    """Password, then emailed OTP, then a token that opens protected endpoints."""
    monkeypatch.setattr("accounts.service.auth._generate_otp", lambda: "654321")

    response = _post(client, "login", {"email": admin_user.email, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    assert response.json() == {"message": "OTP sent to your email."}
    assert len(mail.outbox) == 1

    response = _post(
        client,
        "verify_otp",
        {"email": admin_user.email, "otp": "654321"},
        HTTP_USER_AGENT=BROWSER_USER_AGENT,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful."
    assert data["admin"]["email"] == admin_user.email
    assert data["session"]["is_current"] is True
    assert data["session"]["device_info"]["device"] == "Desktop"
    assert "token" not in data["session"]

    response = client.get(reverse("api:count_sessions"), HTTP_AUTHORIZATION=f"Bearer {data['token']}")
    assert response.status_code == 200
    assert response.json() == {"active_sessions": 1}


def test_login_wrong_password(client: Client, admin_user: AdminUser) -> None:
    response = _post(client, "login", {"email": admin_user.email, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Email or password does not match."
    assert len(mail.outbox) == 0


def test_verify_otp_wrong_code(client: Client, admin_user: AdminUser, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr("accounts.service.auth._generate_otp", lambda: "654321")
    _post(client, "login", {"email": admin_user.email, "password": ADMIN_PASSWORD})

    response = _post(client, "verify_otp", {"email": admin_user.email, "otp": "000000"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid OTP."


def test_verify_otp_expired(client: Client, admin_user: AdminUser, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr("accounts.service.auth._generate_otp", lambda: "654321")
    _post(client, "login", {"email": admin_user.email, "password": ADMIN_PASSWORD})

    with freeze_time(timezone.now() + timedelta(minutes=10)):
        response = _post(client, "verify_otp", {"email": admin_user.email, "otp": "654321"})

    assert response.status_code == 400
    assert response.json()["detail"] == "OTP has expired."


def test_resend_otp_while_valid(client: Client, admin_user: AdminUser) -> None:
    _post(client, "login", {"email": admin_user.email, "password": ADMIN_PASSWORD})

    response = _post(client, "resend_otp", {"email": admin_user.email})

    assert response.status_code == 429


def test_resend_otp_unknown_email(client: Client) -> None:
    response = _post(client, "resend_otp", {"email": "ghost@example.com"})

    assert response.status_code == 200
    assert response.json() == {"message": "If the account exists, a new OTP has been sent."}
    assert len(mail.outbox) == 0


# --- Logout ---


def test_logout_revokes_the_session(auth_client: Client, admin_login: LoginResponseSchema) -> None:
    response = auth_client.post(reverse("api:logout"))

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully."}

    response = auth_client.get(reverse("api:list_sessions"))
    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired or revoked."


def test_logout_requires_a_token(client: Client) -> None:
    response = client.post(reverse("api:logout"))

    assert response.status_code == 401
    assert response.json()["detail"] == "Access token is required."
