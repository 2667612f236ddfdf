"""
Bib number (pettorale) allocation.

Bib numbers are sequential inside a scope: a championship, or a standalone
event. The next number is always the numeric maximum of every bib ever issued
in the scope plus one, so a cancelled registration keeps its number reserved
and "10" correctly sorts after "9".
"""
import enum
import logging
import re
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BibAllocationFailed
from app.db.models.championship import Championship
from app.db.models.championship_registration import ChampionshipRegistration
from app.db.models.event import Event
from app.db.models.event_registration import EventRegistration

logger = logging.getLogger(__name__)

BIB_NUMBER_WIDTH = 3

# Leading optionally-signed integer, trailing text ignored ("12A" -> 12)
_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


class BibScope(str, enum.Enum):
    CHAMPIONSHIP = "championship"
    EVENT = "event"


# scope -> (owner table, registration table, registration column holding the scope id)
_SCOPES = {
    BibScope.CHAMPIONSHIP: (Championship, ChampionshipRegistration, ChampionshipRegistration.championship_id),
    BibScope.EVENT: (Event, EventRegistration, EventRegistration.event_id),
}


def parse_bib_number(value) -> Optional[int]:
    """
    Base-10 value of the leading digits of a stored bib, or None when it does
    not start with a number. "12A" reads as 12, "1_000" as 1.
    """
    if value is None:
        return None
    match = _LEADING_INTEGER.match(str(value))
    if not match:
        return None
    return int(match.group(1), 10)


def format_bib_number(value: Optional[str]) -> Optional[str]:
    """Zero-pad a numeric bib to 3 digits; anything else is returned as is."""
    number = parse_bib_number(value)
    if number is None:
        return value
    return str(number).zfill(BIB_NUMBER_WIDTH)


def is_valid_bib_number(value) -> bool:
    if not value or not str(value).strip():
        return False
    number = parse_bib_number(value)
    return number is not None and number > 0


def compute_next_bib_numbers(existing: Iterable, count: int = 1) -> List[str]:
    """
    Next `count` bibs after the numeric max of `existing`.

    Values that do not start with an integer ("N/A", "", None) are ignored.
    """
    if count < 1:
        raise ValueError("count must be >= 1")

    numeric = [n for n in (parse_bib_number(v) for v in existing) if n is not None]
    next_number = max(numeric) + 1 if numeric else 1

    return [str(next_number + i).zfill(BIB_NUMBER_WIDTH) for i in range(count)]


def _lock_scope(db: Session, scope: BibScope, scope_id: int) -> None:
    owner, _, _ = _SCOPES[scope]
    # Row lock held until the caller's transaction ends (no-op on SQLite)
    db.execute(select(owner.id).where(owner.id == scope_id).with_for_update())


def allocate_next_bib_numbers(
    db: Session,
    scope: BibScope,
    scope_id: int,
    count: int = 1,
    lock: bool = False,
) -> List[str]:
    """
    Return the next `count` free bib numbers in a championship or event.

    Nothing is written: a number is taken only once the caller inserts a
    registration carrying it. Pass lock=True inside the transaction that will
    do that insert to serialise concurrent allocations for the same scope.

    Raises BibAllocationFailed if the registrations cannot be read.
    """
    _, registration, scope_column = _SCOPES[scope]

    try:
        if lock:
            _lock_scope(db, scope, scope_id)
        # Every status: cancelled registrations still reserve their bib
        existing = db.execute(
            select(registration.bib_number).where(scope_column == scope_id)
        ).scalars().all()
    except SQLAlchemyError as e:
        logger.error("Error fetching bib numbers for %s %s: %s", scope.value, scope_id, e)
        raise BibAllocationFailed() from e

    bib_numbers = compute_next_bib_numbers(existing, count)
    logger.debug("Next bib numbers for %s %s: %s", scope.value, scope_id, bib_numbers)
    return bib_numbers


def is_bib_number_assigned(db: Session, scope: BibScope, scope_id: int, bib_number: str) -> bool:
    _, registration, scope_column = _SCOPES[scope]
    found = db.execute(
        select(registration.id)
        .where(scope_column == scope_id, registration.bib_number == bib_number)
        .limit(1)
    ).first()
    return found is not None
