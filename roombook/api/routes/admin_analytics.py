from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from roombook.core.dependencies import get_current_admin, get_db, get_session_factory
from roombook.core.logging_config import get_logger
from roombook.models.admin import Admin
from roombook.services import admin_service

router = APIRouter(prefix="/admin-analytics", tags=["Admin Analytics"])
logger = get_logger()


# =====================================================================
# 1. BOOKING STATISTICS
# =====================================================================
@router.get("/bookings")
def booking_stats(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    result = admin_service.get_booking_stats(db)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)

    logger.bind(log_type="admin").info(
        f"Admin checked booking stats → {result.data['total_bookings']} bookings"
    )
    return result.data


# =====================================================================
# 2. BUILDING USAGE
# =====================================================================
@router.get("/buildings")
def building_stats(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    result = admin_service.get_building_stats(db)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


# =====================================================================
# 3. USER ACTIVITY
# =====================================================================
@router.get("/users")
def user_stats(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    result = admin_service.get_user_stats(db)
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


# =====================================================================
# 4. DASHBOARD OVERVIEW
# =====================================================================
@router.get("/overview")
async def dashboard_overview(
    admin: Admin = Depends(get_current_admin),
    session_factory=Depends(get_session_factory),
):
    result = await admin_service.get_dashboard_overview(session_factory)
    return result.data


# =====================================================================
# 5. DATABASE HEALTH
# =====================================================================
@router.get("/health")
async def database_health(
    admin: Admin = Depends(get_current_admin),
    session_factory=Depends(get_session_factory),
):
    result = await admin_service.check_connection(session_factory)
    if not result.success:
        raise HTTPException(status_code=503, detail=result.error)
    return result.data
