# app/db/models/society.py
import enum
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.session import Base

if TYPE_CHECKING:
    from app.db.models.member import Member


class Organization(str, enum.Enum):
    FIDAL = "FIDAL"
    UISP = "UISP"
    CSI = "CSI"
    RUNCARD = "RUNCARD"
    ALTRO = "ALTRO"


def enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Society(Base):
    """Society managed in ComUniMo (has members and operators)."""
    __tablename__ = "societies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    society_code: Mapped[str | None] = mapped_column(String(50), unique=True, index=True, nullable=True)
    organization: Mapped[Organization | None] = mapped_column(
        SqEnum(Organization, native_enum=False, values_callable=enum_values), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    members: Mapped[List["Member"]] = relationship("Member", back_populates="society")


class AllSociety(Base):
    """
    Directory of every known society (imported from the federations).
    managed_society_id links an entry to the Society row we manage, if any.
    """
    __tablename__ = "all_societies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    society_code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    organization: Mapped[Organization | None] = mapped_column(
        SqEnum(Organization, native_enum=False, values_callable=enum_values), nullable=True
    )
    managed_society_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("societies.id"), nullable=True)

    managed_society: Mapped[Optional["Society"]] = relationship("Society")
