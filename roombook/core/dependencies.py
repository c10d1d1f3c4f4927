from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from roombook.db.session import SessionLocal
from roombook.core.jwt import decode_token
from roombook.models.admin import Admin
from roombook.services.email_service import EmailDispatcher

security = HTTPBearer()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Session factory for handlers that fan work out over several sessions."""
    return SessionLocal


def get_mailer():
    return EmailDispatcher()


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Admin:
    payload = decode_token(credentials.credentials)

    if payload["role"] != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admins only"
        )

    admin = db.query(Admin).filter(Admin.email == payload["sub"]).first()
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    return admin
