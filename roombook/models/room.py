from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from roombook.db.session import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False)

    name = Column(String, nullable=False)
    eid = Column(String, nullable=True)  # external (LibCal) id
    url = Column(String, nullable=True)
    room_type = Column(String, nullable=True)
    capacity = Column(Integer, nullable=True)

    # available=False is the soft delete / "closed" flag
    available = Column(Boolean, default=True, nullable=False)
    under_maintenance = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    building = relationship("Building", back_populates="rooms")
    bookings = relationship("Booking", back_populates="room")

    @property
    def building_name(self):
        return self.building.name if self.building else None

    @property
    def building_short_name(self):
        return self.building.short_name if self.building else None
