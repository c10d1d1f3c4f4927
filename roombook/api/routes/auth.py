from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from roombook.core.dependencies import get_db
from roombook.core.jwt import create_access_token
from roombook.core.logging_config import get_logger
from roombook.core.security import hash_password, verify_and_upgrade
from roombook.models.admin import Admin
from roombook.schemas.admin import AdminCreate, AdminLogin

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = get_logger()


# =====================================================================
#                           ADMIN REGISTER
# =====================================================================
@router.post("/admin/register", status_code=201)
def admin_register(data: AdminCreate, db: Session = Depends(get_db)):
    if db.query(Admin).filter(Admin.email == data.email).first():
        raise HTTPException(status_code=400, detail="Admin already exists")

    hashed = hash_password(data.password)
    admin = Admin(name=data.name, email=data.email, password_hash=hashed)

    db.add(admin)
    db.commit()

    logger.bind(log_type="admin").info(f"Admin registered | Email={data.email}")

    return {"message": "Admin registered successfully"}


# =====================================================================
#                           ADMIN LOGIN
# =====================================================================
@router.post("/admin/login")
def admin_login(data: AdminLogin, db: Session = Depends(get_db)):
    admin = db.query(Admin).filter(Admin.email == data.email).first()
    verified, new_hash = verify_and_upgrade(data.password, admin.password_hash) if admin else (False, None)

    if not verified:
        logger.bind(log_type="admin").warning(f"Failed admin login | Email={data.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if new_hash:
        admin.password_hash = new_hash
        db.commit()

    token = create_access_token({"sub": admin.email, "role": "admin"})

    return {
        "access_token": token,
        "role": "admin",
        "token_type": "bearer"
    }
