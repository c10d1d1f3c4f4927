from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from roombook.core.dependencies import get_current_admin, get_db
from roombook.core.logging_config import get_logger
from roombook.core.redis import delete_cache, delete_cache_prefix
from roombook.models.admin import Admin
from roombook.models.building import Building
from roombook.models.room import Room
from roombook.schemas.admin import AdminOut
from roombook.schemas.booking import StatusUpdate, StatusUpdateError
from roombook.schemas.building import BuildingCreate, BuildingOut, BuildingUpdate, dump_contacts
from roombook.schemas.room import RoomCreate, RoomOut, RoomUpdate
from roombook.services import admin_service
from roombook.api.routes.buildings import BUILDINGS_CACHE_KEY
from roombook.api.routes.rooms import ROOMS_CACHE_KEY

router = APIRouter(prefix="/admin-panel", tags=["Admin Panel"])
logger = get_logger()
admin_log = logger.bind(log_type="admin")

STATUS_UPDATE_CODES = {
    StatusUpdateError.NOT_FOUND: 404,
    StatusUpdateError.ALREADY_CANCELLED: 409,
    StatusUpdateError.SLOT_TAKEN: 409,
    StatusUpdateError.DATABASE_ERROR: 500,
}


def invalidate_listing_cache():
    delete_cache(BUILDINGS_CACHE_KEY, ROOMS_CACHE_KEY)
    delete_cache_prefix("rooms:building:")


# ==================================================
# GET ALL ADMINS
# ==================================================
@router.get("/admins", response_model=list[AdminOut])
def get_all_admins(admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    return db.query(Admin).all()


# ==================================================
# BOOKINGS (PAGINATED + FILTERED)
# ==================================================
@router.get("/bookings")
def list_bookings(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    building: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    user_email: Optional[str] = None,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    if page < 1 or limit < 1:
        raise HTTPException(status_code=400, detail="page and limit must be positive")

    result = admin_service.get_bookings(
        db, page=page, limit=limit, status=status, building=building,
        date_from=date_from, date_to=date_to, user_email=user_email,
    )
    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)
    return result.data


@router.patch("/bookings/{booking_id}/status")
def update_booking_status(
    booking_id: int,
    data: StatusUpdate,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    result = admin_service.update_booking_status(db, booking_id, data.status, data.reason)

    if not result.success:
        raise HTTPException(
            status_code=STATUS_UPDATE_CODES[result.reason],
            detail={"reason": result.reason.value, "message": result.error},
        )

    admin_log.info(f"Admin {admin.email} set booking {booking_id} -> {data.status.value}")
    return result.data


# ==================================================
# BUILDINGS
# ==================================================
@router.get("/buildings", response_model=list[BuildingOut])
def list_buildings(
    available: Optional[bool] = None,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Building)
    if available is not None:
        query = query.filter(Building.available == available)
    return query.order_by(Building.name).all()


@router.post("/buildings", response_model=BuildingOut, status_code=201)
def create_building(
    data: BuildingCreate,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    if db.query(Building).filter(Building.short_name == data.short_name).first():
        raise HTTPException(status_code=400, detail="Building short name already exists")

    now = datetime.now(timezone.utc)
    building = Building(
        name=data.name,
        short_name=data.short_name,
        address=data.address,
        website=data.website,
        contacts=dump_contacts(data.contacts),
        available=data.available,
        latitude=data.latitude,
        longitude=data.longitude,
        created_at=now,
        updated_at=now,
    )

    db.add(building)
    db.commit()
    db.refresh(building)

    invalidate_listing_cache()
    admin_log.info(f"Building created | Id={building.id} | By={admin.email}")
    return building


@router.patch("/buildings/{building_id}", response_model=BuildingOut)
def update_building(
    building_id: int,
    data: BuildingUpdate,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    building = db.query(Building).filter(Building.id == building_id).first()
    if not building:
        raise HTTPException(status_code=404, detail="Building not found")

    updates = data.model_dump(exclude_unset=True)
    if "contacts" in updates:
        updates["contacts"] = dump_contacts(data.contacts)

    for field, value in updates.items():
        setattr(building, field, value)
    building.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(building)

    invalidate_listing_cache()
    admin_log.info(f"Building updated | Id={building_id} | Fields={sorted(updates)} | By={admin.email}")
    return building


@router.delete("/buildings/{building_id}")
def delete_building(
    building_id: int,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    building = db.query(Building).filter(
        Building.id == building_id,
        Building.available == True
    ).first()
    if not building:
        raise HTTPException(status_code=404, detail="Building not found")

    # soft delete: bookings keep pointing at the row
    building.available = False
    building.updated_at = datetime.now(timezone.utc)
    db.commit()

    invalidate_listing_cache()
    admin_log.info(f"Building disabled | Id={building_id} | By={admin.email}")
    return {"message": "Building disabled successfully"}


# ==================================================
# ROOMS
# ==================================================
@router.get("/rooms", response_model=list[RoomOut])
def list_rooms(
    building_id: Optional[int] = None,
    available: Optional[bool] = None,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Room)
    if building_id is not None:
        query = query.filter(Room.building_id == building_id)
    if available is not None:
        query = query.filter(Room.available == available)
    return query.order_by(Room.building_id, Room.name).all()


@router.post("/rooms", response_model=RoomOut, status_code=201)
def create_room(
    data: RoomCreate,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    if not db.query(Building).filter(Building.id == data.building_id).first():
        raise HTTPException(status_code=404, detail="Building not found")

    now = datetime.now(timezone.utc)
    room = Room(**data.model_dump(), created_at=now, updated_at=now)

    db.add(room)
    db.commit()
    db.refresh(room)

    invalidate_listing_cache()
    admin_log.info(f"Room created | Id={room.id} | Building={room.building_id} | By={admin.email}")
    return room


@router.patch("/rooms/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    data: RoomUpdate,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    updates = data.model_dump(exclude_unset=True)
    if "building_id" in updates and not db.query(Building).filter(Building.id == updates["building_id"]).first():
        raise HTTPException(status_code=404, detail="Building not found")

    for field, value in updates.items():
        setattr(room, field, value)
    room.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(room)

    invalidate_listing_cache()
    admin_log.info(f"Room updated | Id={room_id} | Fields={sorted(updates)} | By={admin.email}")
    return room


@router.delete("/rooms/{room_id}")
def delete_room(
    room_id: int,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    room = db.query(Room).filter(Room.id == room_id, Room.available == True).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    room.available = False
    room.updated_at = datetime.now(timezone.utc)
    db.commit()

    invalidate_listing_cache()
    admin_log.info(f"Room disabled | Id={room_id} | By={admin.email}")
    return {"message": "Room disabled successfully"}
