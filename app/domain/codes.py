from __future__ import annotations

import secrets
import string

CODE_CHARSET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "!@#$%^&*"

PUBLIC_CODE_PREFIX = "PUB-"
SECRET_CODE_PREFIX = "SEC-"
ADMIN_TOKEN_PREFIX = "ADM-"
SESSION_CODE_LENGTH = 4
ADMIN_TOKEN_LENGTH = 6
COMMUNITY_CODE_LENGTH = 8


def generate_code(length: int, prefix: str = "") -> str:
    return prefix + "".join(secrets.choice(CODE_CHARSET) for _ in range(length))


def generate_community_code() -> str:
    return generate_code(COMMUNITY_CODE_LENGTH)
