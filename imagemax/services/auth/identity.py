"""
Current-user resolution from signed bearer tokens.
Tokens are issued by the identity service with itsdangerous (shared secret).
"""
from dataclasses import dataclass

from fastapi import Request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from imagemax.core.config import settings
from imagemax.core.errors import UnauthorizedError

TOKEN_SALT = "imagemax-auth"


@dataclass(frozen=True)
class CurrentUser:
    id: str


def _serializer(secret_key: str | None = None) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key or settings.auth_secret_key, salt=TOKEN_SALT)


def issue_token(user_id: str, secret_key: str | None = None) -> str:
    return _serializer(secret_key).dumps({"sub": user_id})


def verify_token(token: str, secret_key: str | None = None, max_age: int | None = None) -> str | None:
    """Return the user id for a valid token, None if tampered or expired."""
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age or settings.auth_token_ttl)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(payload, dict) or not payload.get("sub"):
        return None
    return str(payload["sub"])


def get_current_user(request: Request) -> CurrentUser:
    auth = request.headers.get("Authorization", "")
    token = auth[7:].strip() if auth.startswith("Bearer ") else ""
    if not token:
        raise UnauthorizedError("Unauthorized")
    user_id = verify_token(token)
    if not user_id:
        raise UnauthorizedError("Unauthorized")
    return CurrentUser(id=user_id)
