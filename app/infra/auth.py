from __future__ import annotations

import hashlib
import hmac
import os
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from app.infra.tenant import SESSION_KIND_PORTAL, SESSION_KIND_STAFF

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MIN = int(os.getenv("JWT_EXPIRES_MIN", "480"))
PORTAL_JWT_EXPIRES_MIN = int(os.getenv("PORTAL_JWT_EXPIRES_MIN", "120"))
PASSWORD_HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", "260000"))

PASSWORD_HASH_SCHEME = "pbkdf2_sha256"


def create_access_token(
    *,
    user_id: str,
    barangay_id: str,
    role: str,
    permissions: list[str] | None = None,
    expires_minutes: int | None = None,
) -> str:
    now = datetime.now(UTC)
    expire_delta = timedelta(minutes=expires_minutes or JWT_EXPIRES_MIN)
    payload: dict[str, Any] = {
        "sub": user_id,
        "kind": SESSION_KIND_STAFF,
        "barangay_id": barangay_id,
        "role": role,
        "permissions": permissions or [],
        "iat": int(now.timestamp()),
        "exp": int((now + expire_delta).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_portal_token(*, barangay_id: str, permissions: list[str]) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": f"portal:{barangay_id}",
        "kind": SESSION_KIND_PORTAL,
        "barangay_id": barangay_id,
        "permissions": permissions,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=PORTAL_JWT_EXPIRES_MIN)).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    decoded = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    if not isinstance(decoded, dict):
        raise ValueError("Invalid token payload")
    return decoded


def hash_password(raw_password: str, *, salt: str | None = None, iterations: int | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    rounds = iterations or PASSWORD_HASH_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", raw_password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return f"{PASSWORD_HASH_SCHEME}${rounds}${salt}${digest.hex()}"


def verify_password(raw_password: str, password_hash: str) -> bool:
    try:
        scheme, rounds, salt, _ = password_hash.split("$", 3)
        iterations = int(rounds)
    except ValueError:
        return False
    if scheme != PASSWORD_HASH_SCHEME:
        return False
    expected = hash_password(raw_password, salt=salt, iterations=iterations)
    return hmac.compare_digest(expected, password_hash)
