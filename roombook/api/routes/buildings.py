from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from roombook.core.dependencies import get_db
from roombook.core.redis import get_cache, set_cache
from roombook.models.building import Building
from roombook.models.room import Room
from roombook.schemas.building import BuildingOut
from roombook.schemas.room import RoomOut

router = APIRouter(prefix="/buildings", tags=["Buildings"])

BUILDINGS_CACHE_KEY = "buildings:available"


# =====================================================================
# LIST OPEN BUILDINGS
# =====================================================================
@router.get("/", response_model=list[BuildingOut])
def list_buildings(db: Session = Depends(get_db)):
    cached = get_cache(BUILDINGS_CACHE_KEY)
    if cached is not None:
        return cached

    buildings = (
        db.query(Building)
        .filter(Building.available == True)
        .order_by(Building.name)
        .all()
    )
    data = [BuildingOut.model_validate(b).model_dump(mode="json") for b in buildings]
    set_cache(BUILDINGS_CACHE_KEY, data)
    return data


# =====================================================================
# BUILDING DETAILS
# =====================================================================
@router.get("/{building_id}", response_model=BuildingOut)
def get_building(building_id: int, db: Session = Depends(get_db)):
    building = db.query(Building).filter(
        Building.id == building_id,
        Building.available == True
    ).first()

    if not building:
        raise HTTPException(status_code=404, detail="Building not found")

    return building


# =====================================================================
# ROOMS OF A BUILDING
# =====================================================================
@router.get("/{building_id}/rooms", response_model=list[RoomOut])
def building_rooms(building_id: int, db: Session = Depends(get_db)):
    cache_key = f"rooms:building:{building_id}"
    cached = get_cache(cache_key)
    if cached is not None:
        return cached

    building = db.query(Building).filter(
        Building.id == building_id,
        Building.available == True
    ).first()
    if not building:
        raise HTTPException(status_code=404, detail="Building not found")

    rooms = (
        db.query(Room)
        .filter(Room.building_id == building_id, Room.available == True)
        .order_by(Room.name)
        .all()
    )
    data = [RoomOut.model_validate(r).model_dump(mode="json") for r in rooms]
    set_cache(cache_key, data)
    return data
