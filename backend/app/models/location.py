# backend/app/models/location.py
"""
Beach locations where lessons take place.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
)
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Location(Base):
    """A beach or venue with sand courts."""

    __tablename__ = "locations"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    court_count = Column(Integer, nullable=False, default=1)
    timezone = Column(String(50), nullable=False, default="America/Los_Angeles")
    amenities = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("court_count >= 1", name="ck_locations_court_count"),
        CheckConstraint(
            "latitude IS NULL OR (latitude >= -90 AND latitude <= 90)",
            name="ck_locations_latitude",
        ),
        CheckConstraint(
            "longitude IS NULL OR (longitude >= -180 AND longitude <= 180)",
            name="ck_locations_longitude",
        ),
        Index("idx_locations_city_active", "city", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Location {self.name} ({self.city})>"
