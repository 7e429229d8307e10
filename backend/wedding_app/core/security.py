# backend/wedding_app/core/security.py

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional

from wedding_app.core.config_loader import settings


ALGORITHM = "HS256"


# ---------------------------------------------------------------------------
# JWT CREATION
# ---------------------------------------------------------------------------
def create_access_token(subject: str, account_type: str = "couple", expires_minutes: Optional[int] = None) -> str:
    """
    Default expiration comes from settings.access_token_expire_minutes
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)

    payload = {
        "sub": subject,
        "type": account_type,
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------------------------------------------------------
# JWT VERIFY
# ---------------------------------------------------------------------------
def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
