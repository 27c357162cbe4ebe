import logging
from datetime import datetime, timedelta, timezone
from typing import Dict

import jwt

from doodle.infrastructure.settings import JWT_ALGORITHM, JWT_EXPIRY_DAYS, JWT_SECRET

logger = logging.getLogger(__name__)


def create_access_token(*, user_id: int, email: str, role: str) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(days=JWT_EXPIRY_DAYS)
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "exp": expires_at,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict:
    """
    Decode and verify a bearer token.

    Raises jwt.InvalidTokenError (or a subclass such as ExpiredSignatureError)
    when the signature, expiry or payload shape is invalid.
    """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    if "id" not in payload or "role" not in payload:
        raise jwt.InvalidTokenError("Token payload is missing required claims")
    return payload
