from sqlalchemy import Column, Integer, String, Boolean, Float, Text, DateTime
from sqlalchemy.orm import relationship
from roombook.db.session import Base


class Building(Base):
    __tablename__ = "buildings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    short_name = Column(String, unique=True, index=True, nullable=False)
    address = Column(String, nullable=True)
    website = Column(String, nullable=True)

    # JSON object text: {"phone": ..., "email": ...}
    contacts = Column(Text, nullable=True)

    available = Column(Boolean, default=True, nullable=False)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    rooms = relationship("Room", back_populates="building")
