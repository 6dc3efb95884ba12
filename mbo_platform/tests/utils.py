from datetime import datetime, timedelta, timezone

from jose import jwt

from mbo_platform.core.config import settings


def make_token(user_id, expires_in=timedelta(hours=1), **claims):
    """Token firmado como lo emitiría el proveedor de identidad."""
    payload = {"sub": str(user_id), "exp": datetime.now(timezone.utc) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth_headers(user):
    return {"Authorization": f"Bearer {make_token(user.id)}"}
