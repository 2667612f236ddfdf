"""
Public self-service registration.

An athlete without an account fills the public form and is registered to the
active championship and to every active race in it:

1. resolve the society from its code (managed societies, then the directory)
2. pick the active championship
3. allocate the next bib number in that championship
4. find the member by card (membership number + organization) or create it
5. create the championship registration, or reactivate a cancelled one
6. fan the registration out to every active race (best effort)
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AlreadyRegistered,
    MemberPersistenceFailed,
    NoActiveChampionship,
    PartialRaceFanoutFailure,
    RegistrationError,
    RegistrationPersistenceFailed,
    UnknownRegistrationError,
)
from app.db.models.championship import Championship
from app.db.models.championship_registration import ChampionshipRegistration, RegistrationStatus
from app.db.models.event_registration import EventRegistration, EventRegistrationStatus
from app.db.models.member import Member, MembershipStatus
from app.db.models.society import AllSociety, Society
from app.schemas.registration import PublicRegistrationInput, PublicRegistrationResult
from app.services.bib_numbers import BibScope, allocate_next_bib_numbers, is_bib_number_assigned
from app.services.categories import calculate_category
from app.services.championships import get_active_championship, list_active_races

logger = logging.getLogger(__name__)


def resolve_society_id(db: Session, society_code: str) -> Optional[int]:
    """Society id for a code typed by the athlete, or None when unknown."""
    society_code = (society_code or "").strip()
    if not society_code:
        return None

    society_id = db.execute(
        select(Society.id).where(Society.society_code == society_code)
    ).scalar_one_or_none()
    if society_id is not None:
        return society_id

    directory_entry = db.execute(
        select(AllSociety).where(AllSociety.society_code == society_code)
    ).scalar_one_or_none()
    if directory_entry and directory_entry.managed_society_id:
        return directory_entry.managed_society_id

    return None


def _find_member(db: Session, membership_number: str, organization) -> Optional[Member]:
    return db.execute(
        select(Member).where(
            Member.membership_number == membership_number,
            Member.organization == organization,
        )
    ).scalar_one_or_none()


def find_or_create_member(
    db: Session,
    data: PublicRegistrationInput,
    society_id: Optional[int],
    category: Optional[str],
) -> Member:
    organization = data.membership_type

    member = _find_member(db, data.membership_number, organization)
    if member:
        return member

    member = Member(
        first_name=data.first_name,
        last_name=data.last_name,
        birth_date=data.birth_date,
        gender=data.gender,
        membership_number=data.membership_number or None,
        membership_type=data.membership_type.value,
        organization=organization,
        category=category,
        society_id=society_id,
        membership_status=MembershipStatus.ACTIVE,
        is_active=True,
        notes=f"Iscrizione pubblica - Società: {data.society_name} ({data.society_code})",
    )

    try:
        with db.begin_nested():
            db.add(member)
            db.flush()
    except IntegrityError:
        # Same card inserted by a concurrent request
        member = _find_member(db, data.membership_number, organization)
        if member:
            return member
        logger.error("Error inserting member %s/%s", organization.value, data.membership_number)
        raise MemberPersistenceFailed()
    except SQLAlchemyError as e:
        logger.error("Error inserting member (public registration): %s", e)
        raise MemberPersistenceFailed() from e

    logger.info("Created member %s from public registration", member.id)
    return member


def _insert_championship_registration(
    db: Session,
    championship: Championship,
    member: Member,
    bib_number: str,
    society_id: Optional[int],
    category: Optional[str],
    notes: Optional[str],
) -> ChampionshipRegistration:
    """
    Insert the registration. If another request took the same bib in the
    meantime, allocate again (up to BIB_ALLOCATION_MAX_ATTEMPTS times).
    """
    max_attempts = settings.BIB_ALLOCATION_MAX_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        registration = ChampionshipRegistration(
            championship_id=championship.id,
            member_id=member.id,
            society_id=society_id,
            bib_number=bib_number,
            organization=member.organization,
            category=category,
            status=RegistrationStatus.CONFIRMED,
            notes=notes,
        )
        try:
            with db.begin_nested():
                db.add(registration)
                db.flush()
            return registration
        except IntegrityError as e:
            if not is_bib_number_assigned(db, BibScope.CHAMPIONSHIP, championship.id, bib_number):
                logger.error("Error inserting championship registration: %s", e)
                raise RegistrationPersistenceFailed() from e
            logger.warning(
                "Bib %s already taken in championship %s (attempt %s/%s)",
                bib_number, championship.id, attempt, max_attempts,
            )
            if attempt == max_attempts:
                break
            bib_number = allocate_next_bib_numbers(
                db, BibScope.CHAMPIONSHIP, championship.id, 1, lock=True
            )[0]
        except SQLAlchemyError as e:
            logger.error("Error inserting championship registration: %s", e)
            raise RegistrationPersistenceFailed() from e

    logger.error(
        "Gave up allocating a bib in championship %s after %s attempts",
        championship.id, max_attempts,
    )
    raise RegistrationPersistenceFailed()


def register_member_to_races(
    db: Session,
    championship_id: int,
    member_id: int,
    society_id: Optional[int],
    bib_number: str,
    organization,
    category: Optional[str],
) -> Tuple[List[EventRegistration], List[int]]:
    """
    One confirmed registration per active race, skipping races already joined.

    Each race gets its own savepoint, so a race that rejects the row (e.g. the
    bib is already taken there) does not keep the member out of the others.
    Returns the rows created and the ids of the races that rejected them.
    """
    races = list_active_races(db, championship_id)
    if not races:
        return [], []

    already_in = set(db.execute(
        select(EventRegistration.event_id).where(
            EventRegistration.member_id == member_id,
            EventRegistration.event_id.in_([race.id for race in races]),
        )
    ).scalars().all())

    created, failed = [], []
    for race in races:
        if race.id in already_in:
            continue

        event_registration = EventRegistration(
            event_id=race.id,
            member_id=member_id,
            society_id=society_id,
            bib_number=bib_number,
            organization=organization,
            category=category,
            status=EventRegistrationStatus.CONFIRMED,
        )
        try:
            with db.begin_nested():
                db.add(event_registration)
                db.flush()
        except SQLAlchemyError as e:
            logger.warning("Could not register member %s to race %s: %s", member_id, race.id, e)
            failed.append(race.id)
            continue
        created.append(event_registration)

    return created, failed


def _fan_out_to_races(db: Session, registration: ChampionshipRegistration) -> None:
    try:
        with db.begin_nested():
            created, failed = register_member_to_races(
                db,
                registration.championship_id,
                registration.member_id,
                registration.society_id,
                registration.bib_number,
                registration.organization,
                registration.category,
            )
    except SQLAlchemyError as e:
        raise PartialRaceFanoutFailure(registration.championship_id, registration.member_id, e) from e

    logger.info(
        "Member %s registered to %s races of championship %s",
        registration.member_id, len(created), registration.championship_id,
    )
    if failed:
        raise PartialRaceFanoutFailure(
            registration.championship_id,
            registration.member_id,
            f"rejected by races {failed}",
            race_ids=failed,
        )


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        logger.error("Error committing public registration: %s", e)
        raise RegistrationPersistenceFailed() from e


def _register_athlete(db: Session, data: PublicRegistrationInput) -> PublicRegistrationResult:
    # 1. Society
    society_id = resolve_society_id(db, data.society_code)
    if society_id is None:
        logger.info("Society code %r not found, keeping it in the notes", data.society_code)

    # 2. Active championship
    championship = get_active_championship(db)
    if not championship:
        logger.error("No active championship found")
        raise NoActiveChampionship()

    # 3. Bib (locks the championship row until commit)
    bib_number = allocate_next_bib_numbers(
        db, BibScope.CHAMPIONSHIP, championship.id, 1, lock=True
    )[0]

    # 4. Member
    category = data.category or calculate_category(data.birth_date, data.gender)
    member = find_or_create_member(db, data, society_id, category)

    # 5. Championship registration
    existing = db.execute(
        select(ChampionshipRegistration).where(
            ChampionshipRegistration.championship_id == championship.id,
            ChampionshipRegistration.member_id == member.id,
        )
    ).scalar_one_or_none()

    if existing:
        if existing.status == RegistrationStatus.CONFIRMED:
            raise AlreadyRegistered(existing.bib_number)

        existing.status = RegistrationStatus.CONFIRMED
        _commit(db)
        logger.info(
            "Reactivated registration %s (bib %s) in championship %s",
            existing.id, existing.bib_number, championship.id,
        )
        return PublicRegistrationResult(member_id=member.id, bib_number=existing.bib_number)

    notes = None if society_id else f"Società: {data.society_name} ({data.society_code})"
    registration = _insert_championship_registration(
        db, championship, member, bib_number, society_id, category, notes
    )

    # 6. Races: the championship registration stands even if this fails
    try:
        _fan_out_to_races(db, registration)
    except PartialRaceFanoutFailure as e:
        logger.error("%s", e)

    _commit(db)
    return PublicRegistrationResult(member_id=member.id, bib_number=registration.bib_number)


def register_athlete_publicly(db: Session, data: PublicRegistrationInput) -> PublicRegistrationResult:
    """
    Register an athlete to the active championship and its races.

    Raises a RegistrationError subclass carrying the message to show; any
    unexpected failure becomes UnknownRegistrationError.
    """
    try:
        return _register_athlete(db, data)
    except RegistrationError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Unexpected error in public registration")
        raise UnknownRegistrationError() from e
