from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.db.models.championship_registration import RegistrationStatus
from app.db.models.member import Gender
from app.db.models.society import Organization


class PublicRegistrationInput(BaseModel):
    """Data typed by the athlete in the public registration form."""
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    birth_date: date
    gender: Gender
    membership_number: str = Field(min_length=1, max_length=50)
    membership_type: Organization
    society_name: str = Field(min_length=2, max_length=200)
    society_code: str = Field(min_length=1, max_length=50)
    category: Optional[str] = Field(default=None, max_length=50)

    class Config:
        str_strip_whitespace = True

    @field_validator("birth_date")
    @classmethod
    def birth_date_in_the_past(cls, value: date) -> date:
        if value >= date.today():
            raise ValueError("Data di nascita non valida")
        return value

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class PublicRegistrationResult(BaseModel):
    success: Literal[True] = True
    member_id: int
    bib_number: str


class RegistrationErrorOut(BaseModel):
    success: Literal[False] = False
    error: str
    error_code: str
    retryable: bool
    bib_number: Optional[str] = None


class ChampionshipRegistrationOut(BaseModel):
    id: int
    championship_id: int
    member_id: int
    society_id: int | None = None
    bib_number: str
    organization: Organization | None = None
    category: str | None = None
    status: RegistrationStatus
    notes: str | None = None
    registration_date: datetime | None = None

    class Config:
        from_attributes = True


class RegistrationStatusUpdate(BaseModel):
    status: RegistrationStatus


class RegistrationBibUpdate(BaseModel):
    bib_number: str = Field(min_length=1, max_length=10)

    class Config:
        str_strip_whitespace = True
