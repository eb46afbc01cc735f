import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, Optional

import bcrypt
import jwt

from app.config import settings

log = logging.getLogger("auth")

ALGORITHM = "HS256"


class AuthError(Exception):
    pass


class AuthService:
    """
    Single-admin password check plus short-lived signed tokens.
    The password is only ever held as a bcrypt hash.
    """

    def __init__(
        self,
        password: Optional[str] = None,
        secret_key: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        rounds: Optional[int] = None,
    ):
        raw = password if password is not None else settings.ADMIN_PASS
        self._hash = bcrypt.hashpw(
            raw.encode("utf-8"), bcrypt.gensalt(rounds or settings.BCRYPT_ROUNDS)
        )
        self.secret_key = secret_key or settings.SECRET_KEY
        self.ttl_seconds = ttl_seconds or settings.TOKEN_TTL_SECONDS

    def check_password(self, password: Optional[str]) -> bool:
        if not password:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), self._hash)

    def login(self, password: Optional[str]) -> str:
        if not self.check_password(password):
            log.warning("admin login rejected")
            raise AuthError("Invalid password")
        now = datetime.now(timezone.utc)
        claims = {"role": "admin", "iat": now, "exp": now + timedelta(seconds=self.ttl_seconds)}
        log.info("admin login accepted")
        return jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)

    def verify(self, token: Optional[str]) -> Dict:
        if not token:
            raise AuthError("No Token")
        if token.lower().startswith("bearer "):
            token = token.split(" ", 1)[1]
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError as e:
            raise AuthError("Invalid Token") from e
        if claims.get("role") != "admin":
            raise AuthError("Invalid Token")
        return claims


@lru_cache()
def get_auth_service() -> AuthService:
    return AuthService()
