from datetime import datetime
from typing import Optional

from pydantic import BaseModel, PositiveInt


class RoomBase(BaseModel):
    name: str
    eid: Optional[str] = None
    url: Optional[str] = None
    room_type: Optional[str] = None
    capacity: Optional[PositiveInt] = None


class RoomCreate(RoomBase):
    building_id: PositiveInt
    available: bool = True
    under_maintenance: bool = False


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    eid: Optional[str] = None
    url: Optional[str] = None
    room_type: Optional[str] = None
    capacity: Optional[PositiveInt] = None
    building_id: Optional[PositiveInt] = None
    available: Optional[bool] = None
    under_maintenance: Optional[bool] = None


class RoomOut(RoomBase):
    id: int
    building_id: int
    available: bool
    under_maintenance: bool
    building_name: Optional[str] = None
    building_short_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
