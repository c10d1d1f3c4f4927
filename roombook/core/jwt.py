from datetime import datetime, timedelta, timezone
from fastapi import HTTPException
from jose import jwt, JWTError

from roombook.core.config import get_settings


# -------- CREATE TOKEN --------
def create_access_token(data: dict, expires_delta: int | None = None):
    """Generate JWT token"""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_delta if expires_delta else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# -------- DECODE TOKEN --------
def decode_token(token: str):
    """Decode JWT and return the payload, or raise 401"""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if "sub" not in payload or "role" not in payload:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return payload
