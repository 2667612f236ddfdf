# app/db/models/championship_registration.py
import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.session import Base
from app.db.models.society import Organization, enum_values

if TYPE_CHECKING:
    from app.db.models.championship import Championship
    from app.db.models.member import Member


class RegistrationStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ChampionshipRegistration(Base):
    __tablename__ = "championship_registrations"
    __table_args__ = (
        UniqueConstraint("championship_id", "member_id", name="uq_championship_member"),
        # Closes the read-then-insert window of bib allocation
        UniqueConstraint("championship_id", "bib_number", name="uq_championship_bib"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    championship_id: Mapped[int] = mapped_column(Integer, ForeignKey("championships.id"), nullable=False, index=True)
    member_id: Mapped[int] = mapped_column(Integer, ForeignKey("members.id"), nullable=False)
    society_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("societies.id"), nullable=True)

    bib_number: Mapped[str] = mapped_column(String(10), nullable=False)
    organization: Mapped[Organization | None] = mapped_column(
        SqEnum(Organization, native_enum=False, values_callable=enum_values), nullable=True
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[RegistrationStatus] = mapped_column(
        SqEnum(RegistrationStatus, native_enum=False, values_callable=enum_values),
        default=RegistrationStatus.CONFIRMED,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)  # display only
    registration_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    championship: Mapped["Championship"] = relationship("Championship", back_populates="registrations")
    member: Mapped["Member"] = relationship("Member", back_populates="championship_registrations")
