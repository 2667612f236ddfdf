# app/db/models/event.py
from datetime import date, datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.session import Base

if TYPE_CHECKING:
    from app.db.models.championship import Championship
    from app.db.models.event_registration import EventRegistration


class Event(Base):
    """A single race. championship_id is NULL for standalone events."""
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    championship_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("championships.id"), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_number: Mapped[int | None] = mapped_column(Integer, nullable=True)  # tappa
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    championship: Mapped[Optional["Championship"]] = relationship("Championship", back_populates="races")
    registrations: Mapped[List["EventRegistration"]] = relationship("EventRegistration", back_populates="event")
