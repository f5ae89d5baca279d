from datetime import timedelta
from typing import Any

from boringblog.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from boringblog.domain.entities import User


class JWTAuthAdapter:
    """Session tokens as signed JWTs; passwords hashed with passlib (argon2)."""

    def __init__(self, secret_key: str, ttl_minutes: int = 60 * 24 * 7):
        self.secret_key = secret_key
        self.ttl_minutes = ttl_minutes

    def hash_password(self, plain: str) -> str:
        return get_password_hash(plain)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def create_token(self, user: User) -> str:
        claims = {"sub": str(user.id), "role": user.role, "name": user.name}
        return create_access_token(
            claims, self.secret_key, timedelta(minutes=self.ttl_minutes)
        )

    def validate_token(self, token: str) -> dict[str, Any] | None:
        payload = decode_access_token(token, self.secret_key)
        if not payload or not isinstance(payload.get("sub"), str):
            return None
        return payload
