from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.championship import ActiveChampionshipOut, RaceOut
from app.schemas.registration import (
    PublicRegistrationInput,
    PublicRegistrationResult,
    RegistrationErrorOut,
)
from app.services.championships import get_active_championship, list_active_races
from app.services.public_registration import register_athlete_publicly

router = APIRouter(prefix="/public", tags=["Public registration"])


@router.post(
    "/registrations",
    response_model=PublicRegistrationResult,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": RegistrationErrorOut},
        409: {"model": RegistrationErrorOut},
        500: {"model": RegistrationErrorOut},
        503: {"model": RegistrationErrorOut},
    },
)
def public_register_athlete(data: PublicRegistrationInput, db: Session = Depends(get_db)):
    """
    Iscrizione pubblica: no account needed.
    Errors are RegistrationError subclasses, rendered by the handler in main.py.
    """
    return register_athlete_publicly(db, data)


@router.get("/championships/active", response_model=ActiveChampionshipOut)
def get_public_active_championship(db: Session = Depends(get_db)):
    championship = get_active_championship(db)
    if not championship:
        raise HTTPException(status_code=404, detail="Nessun campionato attivo")

    return ActiveChampionshipOut(
        id=championship.id,
        name=championship.name,
        year=championship.year,
        created_at=championship.created_at,
        races=[RaceOut.model_validate(race) for race in list_active_races(db, championship.id)],
    )
