from types import SimpleNamespace

import pytest
from django.core import mail
from django.core.mail import EmailMultiAlternatives
from rest_framework.test import APIClient

from accounts.models import RefreshTokenRecord, User
from accounts.services import accounts as account_services
from accounts.services.hashing import hash_token
from accounts.services.tokens import decode_access_token, issue_token_pair
from notifications import tasks
from notifications.models import OutboundEmail

RAW_TOKEN = "f" * 64


def _register(client, **overrides):
    payload = {
        "full_name": "Nadia Nomad",
        "email": "Nadia@Example.com",
        "password": "wander123",
    }
    payload.update(overrides)
    return client.post("/api/auth/register/", payload, format="json")


@pytest.mark.django_db
def test_register_creates_customer_and_sends_verification():
    response = _register(APIClient())

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "nadia@example.com"
    assert data["user"]["role"] == User.CUSTOMER
    assert data["requires_verification"] is True
    assert "password" not in data["user"]
    assert decode_access_token(data["tokens"]["access_token"])["id"] == data["user"]["id"]

    user = User.objects.get(email="nadia@example.com")
    assert user.email_verification_token_hash
    assert OutboundEmail.objects.filter(to_email=user.email, template="verify_email").exists()


@pytest.mark.django_db
def test_register_rejects_duplicate_email_case_insensitively():
    client = APIClient()
    _register(client)

    response = _register(client, email="NADIA@example.com")

    assert response.status_code == 409
    assert User.objects.filter(email="nadia@example.com").count() == 1


@pytest.mark.django_db
def test_password_needs_a_digit():
    response = _register(APIClient(), password="nodigits")

    assert response.status_code == 422


@pytest.mark.django_db
def test_verify_email_with_valid_token(monkeypatch):
    monkeypatch.setattr(account_services, "generate_raw_token", lambda: RAW_TOKEN)
    client = APIClient()
    _register(client)

    response = client.post(
        "/api/auth/verify-email/",
        {"email": "nadia@example.com", "token": RAW_TOKEN},
        format="json",
    )

    assert response.status_code == 200
    user = User.objects.get(email="nadia@example.com")
    assert user.is_email_verified is True
    assert user.email_verification_token_hash == ""
    assert OutboundEmail.objects.filter(to_email=user.email, template="welcome").exists()


@pytest.mark.django_db
def test_verify_email_with_wrong_token_is_400():
    client = APIClient()
    _register(client)

    response = client.post(
        "/api/auth/verify-email/",
        {"email": "nadia@example.com", "token": "not-the-token"},
        format="json",
    )

    assert response.status_code == 400
    assert User.objects.get(email="nadia@example.com").is_email_verified is False


@pytest.mark.django_db
def test_login_returns_token_pair(customer):
    response = APIClient().post(
        "/api/auth/login/",
        {"email": "TRAVELER@example.com", "password": "password123"},
        format="json",
    )

    assert response.status_code == 200
    tokens = response.json()["data"]["tokens"]
    assert tokens["token_type"] == "Bearer"
    assert RefreshTokenRecord.objects.filter(user=customer).count() == 1


@pytest.mark.django_db
def test_login_succeeds_when_mail_server_is_down(monkeypatch, customer, django_capture_on_commit_callbacks):
    def broken_send(self, fail_silently=False):
        raise RuntimeError("mail backend exploded")

    monkeypatch.setattr(EmailMultiAlternatives, "send", broken_send)

    with django_capture_on_commit_callbacks(execute=True):
        response = APIClient().post(
            "/api/auth/login/",
            {"email": customer.email, "password": "password123"},
            format="json",
        )

    assert response.status_code == 200
    assert RefreshTokenRecord.objects.filter(user=customer).count() == 1
    message = OutboundEmail.objects.get(template="login_notification")
    assert message.status == OutboundEmail.PENDING
    assert message.attempts == 1
    assert message.last_error == "mail backend exploded"


@pytest.mark.django_db
def test_login_queues_notification_without_sending_in_request(customer, django_capture_on_commit_callbacks, monkeypatch):
    dispatched = []
    monkeypatch.setattr(tasks, "deliver_email", SimpleNamespace(delay=dispatched.append))

    with django_capture_on_commit_callbacks(execute=True):
        response = APIClient().post(
            "/api/auth/login/",
            {"email": customer.email, "password": "password123"},
            format="json",
        )

    assert response.status_code == 200
    message = OutboundEmail.objects.get(template="login_notification")
    assert dispatched == [message.pk]
    assert message.attempts == 0
    assert mail.outbox == []

@pytest.mark.django_db
def test_login_with_wrong_password_is_401(customer):
    response = APIClient().post(
        "/api/auth/login/",
        {"email": customer.email, "password": "wrong-password1"},
        format="json",
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password."


@pytest.mark.django_db
def test_bearer_access_token_authenticates(customer):
    pair = issue_token_pair(customer)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {pair.access_token}")

    response = client.get("/api/auth/me/")

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == customer.email


@pytest.mark.django_db
def test_refresh_token_cannot_be_used_as_access_token(customer):
    pair = issue_token_pair(customer)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {pair.refresh_token}")

    assert client.get("/api/auth/me/").status_code == 401


@pytest.mark.django_db
def test_refresh_rotation_invalidates_presented_token(customer):
    pair = issue_token_pair(customer)
    client = APIClient()

    first = client.post("/api/auth/refresh-token/", {"refresh_token": pair.refresh_token}, format="json")
    assert first.status_code == 200
    new_refresh = first.json()["data"]["tokens"]["refresh_token"]
    assert new_refresh != pair.refresh_token

    replay = client.post("/api/auth/refresh-token/", {"refresh_token": pair.refresh_token}, format="json")
    assert replay.status_code == 401

    assert not RefreshTokenRecord.objects.filter(token_hash=hash_token(pair.refresh_token)).exists()
    assert RefreshTokenRecord.objects.filter(token_hash=hash_token(new_refresh)).exists()


@pytest.mark.django_db
def test_logout_revokes_refresh_token(customer_client, customer):
    pair = issue_token_pair(customer)

    response = customer_client.post("/api/auth/logout/", {"refresh_token": pair.refresh_token}, format="json")

    assert response.status_code == 200
    assert not RefreshTokenRecord.objects.filter(user=customer).exists()


@pytest.mark.django_db
def test_password_reset_round_trip(monkeypatch, customer):
    monkeypatch.setattr(account_services, "generate_raw_token", lambda: RAW_TOKEN)
    issue_token_pair(customer)
    client = APIClient()

    forgot = client.post("/api/auth/forgot-password/", {"email": customer.email}, format="json")
    assert forgot.status_code == 200

    reset = client.post(
        "/api/auth/reset-password/",
        {"email": customer.email, "token": RAW_TOKEN, "password": "newpass123"},
        format="json",
    )
    assert reset.status_code == 200

    customer.refresh_from_db()
    assert customer.check_password("newpass123")
    assert customer.password_reset_token_hash == ""
    assert not RefreshTokenRecord.objects.filter(user=customer).exists()

    login = client.post(
        "/api/auth/login/",
        {"email": customer.email, "password": "newpass123"},
        format="json",
    )
    assert login.status_code == 200

    again = client.post(
        "/api/auth/reset-password/",
        {"email": customer.email, "token": RAW_TOKEN, "password": "another123"},
        format="json",
    )
    assert again.status_code == 400


@pytest.mark.django_db
def test_forgot_password_is_silent_for_unknown_email():
    response = APIClient().post("/api/auth/forgot-password/", {"email": "ghost@example.com"}, format="json")

    assert response.status_code == 200
    assert not OutboundEmail.objects.exists()


@pytest.mark.django_db
def test_change_password_requires_current_password(customer_client, customer):
    wrong = customer_client.put(
        "/api/auth/change-password/",
        {"current_password": "nope12345", "new_password": "fresh12345"},
        format="json",
    )
    assert wrong.status_code == 401

    right = customer_client.put(
        "/api/auth/change-password/",
        {"current_password": "password123", "new_password": "fresh12345"},
        format="json",
    )
    assert right.status_code == 200
    customer.refresh_from_db()
    assert customer.check_password("fresh12345")
