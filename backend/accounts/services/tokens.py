"""
Access and refresh token issuance, verification and rotation.

Access tokens are stateless and trusted until they expire. Refresh tokens are
signed with a separate secret and are only honoured while a matching
``RefreshTokenRecord`` exists, so a refresh token can be used exactly once and
can be revoked server side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from uuid import uuid4

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import InvalidToken, TokenBackendError

from accounts.models import RefreshTokenRecord

from .hashing import hash_token

logger = logging.getLogger(__name__)

User = get_user_model()

ACCESS = "access"
REFRESH = "refresh"
ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def as_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": "Bearer",
            "expires_in": int(settings.JWT_ACCESS_TTL.total_seconds()),
        }


def _backend(token_type: str) -> TokenBackend:
    secret = settings.JWT_ACCESS_SECRET if token_type == ACCESS else settings.JWT_REFRESH_SECRET
    return TokenBackend(ALGORITHM, signing_key=secret)


def _lifetime(token_type: str) -> timedelta:
    return settings.JWT_ACCESS_TTL if token_type == ACCESS else settings.JWT_REFRESH_TTL


def _encode(user, token_type: str) -> str:
    issued_at = timezone.now()
    payload = {
        "id": user.pk,
        "email": user.email,
        "role": user.role,
        "token_type": token_type,
        "jti": uuid4().hex,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + _lifetime(token_type)).timestamp()),
    }
    return _backend(token_type).encode(payload)


def _decode(raw_token, token_type: str) -> dict:
    if isinstance(raw_token, bytes):
        raw_token = raw_token.decode("utf-8")
    try:
        payload = _backend(token_type).decode(raw_token, verify=True)
    except TokenBackendError as exc:
        raise InvalidToken(f"Invalid or expired {token_type} token.") from exc
    if payload.get("token_type") != token_type or "id" not in payload:
        raise InvalidToken(f"Invalid {token_type} token.")
    return payload


def decode_access_token(raw_token) -> dict:
    return _decode(raw_token, ACCESS)


def decode_refresh_token(raw_token) -> dict:
    return _decode(raw_token, REFRESH)


def issue_token_pair(user) -> TokenPair:
    """Sign a new access/refresh pair and remember the refresh token."""

    access_token = _encode(user, ACCESS)
    refresh_token = _encode(user, REFRESH)
    now = timezone.now()
    RefreshTokenRecord.objects.filter(user=user, expires_at__lt=now).delete()
    RefreshTokenRecord.objects.create(
        user=user,
        token_hash=hash_token(refresh_token),
        expires_at=now + settings.JWT_REFRESH_TTL,
    )
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def rotate_refresh_token(raw_token: str):
    """
    Exchange a refresh token for a new pair.

    The stored record is removed with a single conditional delete; if another
    request already consumed it the row count is zero and the token is
    rejected.
    """

    payload = decode_refresh_token(raw_token)
    with transaction.atomic():
        deleted, _ = RefreshTokenRecord.objects.filter(
            token_hash=hash_token(raw_token),
            user_id=payload["id"],
        ).delete()
        if not deleted:
            logger.info("Rejected reuse of refresh token for user %s", payload["id"])
            raise InvalidToken("Invalid refresh token.")

        user = User.objects.filter(pk=payload["id"]).first()
        if user is None:
            raise InvalidToken("User not found.")
        if not user.is_active:
            raise InvalidToken("Account has been deactivated.")
        return user, issue_token_pair(user)


def revoke_refresh_token(user, raw_token: str) -> int:
    deleted, _ = RefreshTokenRecord.objects.filter(
        user=user,
        token_hash=hash_token(raw_token),
    ).delete()
    return deleted


def revoke_all_refresh_tokens(user) -> int:
    deleted, _ = RefreshTokenRecord.objects.filter(user=user).delete()
    return deleted
