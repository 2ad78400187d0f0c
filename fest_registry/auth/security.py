from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import jwt

from fest_registry.core.config import settings


def create_access_token(
    *, subject: Dict, expires_minutes: Optional[int] = None
) -> str:
    """Sign an access token. Tokens are issued by the login service; used here by tooling and tests."""
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes

    to_encode = subject.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def token_for_user(user_id: int, role: str) -> str:
    return create_access_token(subject={"user_id": user_id, "role": role})
