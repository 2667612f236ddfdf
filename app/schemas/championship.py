from datetime import date, datetime
from typing import List

from pydantic import BaseModel, Field


class RaceOut(BaseModel):
    id: int
    title: str
    event_date: date
    event_number: int | None = None
    location: str | None = None

    class Config:
        from_attributes = True


class ActiveChampionshipOut(BaseModel):
    id: int
    name: str
    year: int
    created_at: datetime | None = None
    races: List[RaceOut] = []

    class Config:
        from_attributes = True


class BibNumbersOut(BaseModel):
    scope: str
    scope_id: int
    bib_numbers: List[str] = Field(min_length=1)
