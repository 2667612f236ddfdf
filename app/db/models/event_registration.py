# app/db/models/event_registration.py
import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.session import Base
from app.db.models.society import Organization, enum_values

if TYPE_CHECKING:
    from app.db.models.event import Event
    from app.db.models.member import Member


class EventRegistrationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "member_id", name="uq_event_member"),
        UniqueConstraint("event_id", "bib_number", name="uq_event_bib"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    member_id: Mapped[int] = mapped_column(Integer, ForeignKey("members.id"), nullable=False)
    society_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("societies.id"), nullable=True)

    bib_number: Mapped[str | None] = mapped_column(String(10), nullable=True)
    organization: Mapped[Organization | None] = mapped_column(
        SqEnum(Organization, native_enum=False, values_callable=enum_values), nullable=True
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[EventRegistrationStatus] = mapped_column(
        SqEnum(EventRegistrationStatus, native_enum=False, values_callable=enum_values),
        default=EventRegistrationStatus.CONFIRMED,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    registration_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    event: Mapped["Event"] = relationship("Event", back_populates="registrations")
    member: Mapped["Member"] = relationship("Member", back_populates="event_registrations")
