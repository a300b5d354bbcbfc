"""
Workout-related database models.

Models:
- Workout: Provider workout merged by provider_id
- RoutePoint: Simplified GPS sample belonging to a workout
- KeyValue: Named durable slots (sync watermark)
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, DateTime, Integer, Float, Boolean, ForeignKey, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from plore.models.base import Base


class Workout(Base):
    """
    Workout session synced from the health data provider.

    Merged with find-or-create on provider_id; fields are last-writer-wins.
    """

    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_id = Column(String(64), unique=True, nullable=False, index=True)

    # Stored as ActivityKind value; parsed again on read
    activity_type = Column(String(32), nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    indoor = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    route_points = relationship(
        "RoutePoint",
        back_populates="workout",
        lazy="selectin",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Workout {self.provider_id} {self.activity_type} points={len(self.route_points)}>"


class RoutePoint(Base):
    """
    One retained sample of a simplified route.

    Storage order is not guaranteed; readers sort by timestamp.
    """

    __tablename__ = "route_points"
    __table_args__ = (
        UniqueConstraint("workout_id", "timestamp", name="uq_route_points_workout_timestamp"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    workout_id = Column(
        Integer,
        ForeignKey("workouts.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False)

    workout = relationship("Workout", back_populates="route_points")

    def __repr__(self):
        return f"<RoutePoint {self.latitude:.6f},{self.longitude:.6f} @ {self.timestamp}>"


class KeyValue(Base):
    """Process-durable named value slot."""

    __tablename__ = "key_value"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
