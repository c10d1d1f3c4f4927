from sqlalchemy import (
    CheckConstraint, Column, Integer, String, Date, Time, DateTime, Text, ForeignKey, Index,
)
from sqlalchemy.orm import relationship
from roombook.db.session import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_reference = Column(String(8), unique=True, index=True, nullable=False)
    verification_code = Column(String(6), nullable=False)

    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False)

    # Snapshot of the room/building at booking time
    room_name = Column(String, nullable=False)
    room_eid = Column(String, nullable=True)
    room_capacity = Column(Integer, nullable=True)
    building_name = Column(String, nullable=False)
    building_short_name = Column(String, nullable=True)

    user_name = Column(String, nullable=False)
    user_email = Column(String, index=True, nullable=False)
    contact_phone = Column(String, nullable=True)
    group_size = Column(Integer, nullable=True)
    purpose = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    status = Column(String, default="pending", nullable=False)  # pending | confirmed | active | cancelled | completed
    verification_status = Column(String, default="pending", nullable=False)  # pending | verified

    cancellation_reason = Column(String, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    room = relationship("Room", back_populates="bookings")
    building = relationship("Building")

    __table_args__ = (
        Index("ix_bookings_room_date", "room_id", "booking_date"),
        CheckConstraint("start_time < end_time", name="ck_bookings_time_order"),
    )
