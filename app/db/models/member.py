# app/db/models/member.py
import enum
from datetime import date, datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.session import Base
from app.db.models.society import Organization, enum_values

if TYPE_CHECKING:
    from app.db.models.society import Society
    from app.db.models.championship_registration import ChampionshipRegistration
    from app.db.models.event_registration import EventRegistration


class Gender(str, enum.Enum):
    M = "M"
    F = "F"


class MembershipStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        # NULLs never collide, so members without a card can coexist
        UniqueConstraint("membership_number", "organization", name="uq_member_card"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    society_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("societies.id"), nullable=True)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[Gender | None] = mapped_column(
        SqEnum(Gender, native_enum=False, values_callable=enum_values), nullable=True
    )

    membership_number: Mapped[str | None] = mapped_column(String(50), index=True, nullable=True)
    membership_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    organization: Mapped[Organization | None] = mapped_column(
        SqEnum(Organization, native_enum=False, values_callable=enum_values), nullable=True
    )
    membership_status: Mapped[MembershipStatus] = mapped_column(
        SqEnum(MembershipStatus, native_enum=False, values_callable=enum_values),
        default=MembershipStatus.ACTIVE,
    )

    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    society: Mapped[Optional["Society"]] = relationship("Society", back_populates="members")
    championship_registrations: Mapped[List["ChampionshipRegistration"]] = relationship(
        "ChampionshipRegistration", back_populates="member"
    )
    event_registrations: Mapped[List["EventRegistration"]] = relationship(
        "EventRegistration", back_populates="member"
    )
