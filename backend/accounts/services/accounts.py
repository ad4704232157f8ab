from __future__ import annotations

import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.exceptions import BadRequest, Conflict, NotFound, Unauthorized
from notifications.services import emails

from .hashing import generate_raw_token, hash_token
from .tokens import TokenPair, issue_token_pair, revoke_all_refresh_tokens

logger = logging.getLogger(__name__)

User = get_user_model()

VERIFICATION_LIFETIME = timedelta(hours=24)
RESET_LIFETIME = timedelta(hours=1)


def issue_email_verification_token(user) -> str:
    raw_token = generate_raw_token()
    user.email_verification_token_hash = hash_token(raw_token)
    user.email_verification_expires_at = timezone.now() + VERIFICATION_LIFETIME
    user.save(update_fields=["email_verification_token_hash", "email_verification_expires_at"])
    return raw_token


def issue_password_reset_token(user) -> str:
    raw_token = generate_raw_token()
    user.password_reset_token_hash = hash_token(raw_token)
    user.password_reset_expires_at = timezone.now() + RESET_LIFETIME
    user.save(update_fields=["password_reset_token_hash", "password_reset_expires_at"])
    return raw_token


def check_one_time_token(*, raw_token: str, stored_hash: str, expires_at, now=None) -> str | None:
    """Return ``None`` when the token is valid, otherwise ``"invalid"`` or ``"expired"``."""

    now = now or timezone.now()
    if not stored_hash or hash_token(raw_token) != stored_hash:
        return "invalid"
    if expires_at is None or expires_at < now:
        return "expired"
    return None


@transaction.atomic
def register_user(*, full_name: str, email: str, password: str, phone: str = ""):
    email = email.lower()
    if User.objects.filter(email__iexact=email).exists():
        raise Conflict("Email already registered.")

    user = User.objects.create_user(
        username=email,
        email=email,
        password=password,
        full_name=full_name,
        phone=phone,
    )
    raw_token = issue_email_verification_token(user)
    emails.send_verification_email(user, raw_token)
    pair = issue_token_pair(user)
    logger.info("Registered user %s", user.pk)
    return user, pair


def resend_verification(email: str):
    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None:
        raise NotFound("User not found.")
    if user.is_email_verified:
        return user, False
    raw_token = issue_email_verification_token(user)
    emails.send_verification_email(user, raw_token)
    return user, True


@transaction.atomic
def verify_email(*, email: str, token: str):
    """
    Mark the account verified. Returns ``(user, pair)``; ``pair`` is ``None``
    when the account was already verified.
    """

    user = User.objects.select_for_update().filter(email__iexact=email, is_active=True).first()
    if user is None:
        raise NotFound("User not found.")
    if user.is_email_verified:
        return user, None

    problem = check_one_time_token(
        raw_token=token,
        stored_hash=user.email_verification_token_hash,
        expires_at=user.email_verification_expires_at,
    )
    if problem == "expired":
        raise BadRequest("Verification link has expired. Please request a new one.")
    if problem:
        raise BadRequest("Invalid verification link. Please try again.")

    user.is_email_verified = True
    user.email_verification_token_hash = ""
    user.email_verification_expires_at = None
    user.last_login = timezone.now()
    user.save(
        update_fields=[
            "is_email_verified",
            "email_verification_token_hash",
            "email_verification_expires_at",
            "last_login",
        ]
    )
    emails.send_welcome_email(user)
    return user, issue_token_pair(user)


def authenticate_credentials(*, email: str, password: str):
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise Unauthorized("Invalid email or password.")
    if not user.is_active:
        raise Unauthorized("Account has been deactivated.")
    if not user.check_password(password):
        raise Unauthorized("Invalid email or password.")
    return user


@transaction.atomic
def login(*, email: str, password: str, user_agent: str = "", ip_address: str = "") -> tuple:
    user = authenticate_credentials(email=email, password=password)
    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])
    pair = issue_token_pair(user)
    emails.send_login_notification_email(
        user,
        user_agent=user_agent or "Unknown",
        ip_address=ip_address or "Unknown",
    )
    return user, pair


@transaction.atomic
def change_password(user, *, current_password: str, new_password: str) -> TokenPair:
    if not user.check_password(current_password):
        raise Unauthorized("Current password is incorrect.")
    user.set_password(new_password)
    user.save(update_fields=["password"])
    revoke_all_refresh_tokens(user)
    return issue_token_pair(user)


@transaction.atomic
def request_password_reset(email: str) -> None:
    """Email a reset link when the account exists; silent otherwise."""

    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return
    raw_token = issue_password_reset_token(user)
    emails.send_password_reset_email(user, raw_token)


@transaction.atomic
def reset_password(*, email: str, token: str, password: str):
    user = User.objects.select_for_update().filter(email__iexact=email, is_active=True).first()
    if user is None:
        raise BadRequest("Invalid or expired password reset token.")

    problem = check_one_time_token(
        raw_token=token,
        stored_hash=user.password_reset_token_hash,
        expires_at=user.password_reset_expires_at,
    )
    if problem:
        raise BadRequest("Invalid or expired password reset token.")

    user.set_password(password)
    user.password_reset_token_hash = ""
    user.password_reset_expires_at = None
    user.save(update_fields=["password", "password_reset_token_hash", "password_reset_expires_at"])
    revoked = revoke_all_refresh_tokens(user)
    logger.info("Password reset for user %s revoked %s refresh tokens", user.pk, revoked)
    return user


@transaction.atomic
def deactivate_account(user) -> None:
    """Soft delete: keep the row for bookings and reviews, free the email."""

    stamp = int(timezone.now().timestamp())
    mangled = f"deleted_{stamp}_{user.email}"
    user.is_active = False
    user.email = mangled[:254]
    user.username = mangled[:150]
    user.save(update_fields=["is_active", "email", "username"])
    revoke_all_refresh_tokens(user)
