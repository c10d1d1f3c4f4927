from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from roombook.core.dependencies import get_db
from roombook.core.redis import get_cache, set_cache
from roombook.models.building import Building
from roombook.models.room import Room
from roombook.schemas.room import RoomOut

router = APIRouter(prefix="/rooms", tags=["Rooms"])

ROOMS_CACHE_KEY = "rooms:available"


# =====================================================================
# LIST BOOKABLE ROOMS
# =====================================================================
@router.get("/", response_model=list[RoomOut])
def list_rooms(db: Session = Depends(get_db)):
    cached = get_cache(ROOMS_CACHE_KEY)
    if cached is not None:
        return cached

    rooms = (
        db.query(Room)
        .join(Building)
        .filter(Room.available == True, Building.available == True)
        .order_by(Building.name, Room.name)
        .all()
    )
    data = [RoomOut.model_validate(r).model_dump(mode="json") for r in rooms]
    set_cache(ROOMS_CACHE_KEY, data)
    return data


# =====================================================================
# ROOM DETAILS
# =====================================================================
@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: int, db: Session = Depends(get_db)):
    room = db.query(Room).filter(Room.id == room_id, Room.available == True).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room
