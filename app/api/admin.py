import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.deps import require_admin
from app.db.models.championship import Championship
from app.db.models.championship_registration import ChampionshipRegistration, RegistrationStatus
from app.db.models.event import Event
from app.db.session import get_db
from app.schemas.championship import BibNumbersOut
from app.schemas.registration import (
    ChampionshipRegistrationOut,
    RegistrationBibUpdate,
    RegistrationStatusUpdate,
)
from app.services.bib_numbers import (
    BibScope,
    allocate_next_bib_numbers,
    format_bib_number,
    is_bib_number_assigned,
    is_valid_bib_number,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

# Same ceiling as bulk registration from the dashboard
MAX_BIB_BATCH = 100


# -----------------------
# Pettorali
# -----------------------
@router.get("/championships/{championship_id}/bib-numbers/next", response_model=BibNumbersOut)
def next_championship_bib_numbers(
    championship_id: int,
    count: int = Query(1, ge=1, le=MAX_BIB_BATCH),
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    if not db.get(Championship, championship_id):
        raise HTTPException(404, "Campionato non trovato")

    bib_numbers = allocate_next_bib_numbers(db, BibScope.CHAMPIONSHIP, championship_id, count)
    return BibNumbersOut(scope=BibScope.CHAMPIONSHIP.value, scope_id=championship_id, bib_numbers=bib_numbers)


@router.get("/events/{event_id}/bib-numbers/next", response_model=BibNumbersOut)
def next_event_bib_numbers(
    event_id: int,
    count: int = Query(1, ge=1, le=MAX_BIB_BATCH),
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    if not db.get(Event, event_id):
        raise HTTPException(404, "Evento non trovato")

    bib_numbers = allocate_next_bib_numbers(db, BibScope.EVENT, event_id, count)
    return BibNumbersOut(scope=BibScope.EVENT.value, scope_id=event_id, bib_numbers=bib_numbers)


# -----------------------
# Iscrizioni campionato
# -----------------------
@router.get("/championships/{championship_id}/registrations", response_model=list[ChampionshipRegistrationOut])
def list_championship_registrations(
    championship_id: int,
    status: Optional[RegistrationStatus] = None,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    query = select(ChampionshipRegistration).where(
        ChampionshipRegistration.championship_id == championship_id
    )
    if status:
        query = query.where(ChampionshipRegistration.status == status)

    return db.execute(query.order_by(ChampionshipRegistration.id)).scalars().all()


@router.patch(
    "/championships/{championship_id}/registrations/{registration_id}/status",
    response_model=ChampionshipRegistrationOut,
)
def update_registration_status(
    championship_id: int,
    registration_id: int,
    update: RegistrationStatusUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    """Cancel or confirm a registration. The bib stays reserved either way."""
    registration = db.get(ChampionshipRegistration, registration_id)
    if not registration or registration.championship_id != championship_id:
        raise HTTPException(404, "Iscrizione non trovata")

    registration.status = update.status
    db.commit()
    db.refresh(registration)

    logger.info(
        "Registration %s set to %s by user %s",
        registration.id, update.status.value, current_user.id,
    )
    return registration


@router.patch(
    "/championships/{championship_id}/registrations/{registration_id}/bib",
    response_model=ChampionshipRegistrationOut,
)
def update_registration_bib(
    championship_id: int,
    registration_id: int,
    update: RegistrationBibUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    """Assign a bib by hand. Numeric bibs are stored zero-padded ("7" -> "007")."""
    registration = db.get(ChampionshipRegistration, registration_id)
    if not registration or registration.championship_id != championship_id:
        raise HTTPException(404, "Iscrizione non trovata")

    if not is_valid_bib_number(update.bib_number):
        raise HTTPException(422, "Numero di pettorale non valido")

    bib_number = format_bib_number(update.bib_number)
    if bib_number == registration.bib_number:
        return registration

    if is_bib_number_assigned(db, BibScope.CHAMPIONSHIP, championship_id, bib_number):
        raise HTTPException(409, f"Pettorale n° {bib_number} già assegnato in questo campionato")

    previous = registration.bib_number
    registration.bib_number = bib_number
    db.commit()
    db.refresh(registration)

    logger.info(
        "Registration %s bib changed from %s to %s by user %s",
        registration.id, previous, bib_number, current_user.id,
    )
    return registration
