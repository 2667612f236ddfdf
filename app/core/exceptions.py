"""
Registration failures.

Every failure the public registration workflow can report to its caller is a
``RegistrationError``: an HTTPException with a user-facing Italian message, a
stable ``error_code`` and a flag telling the form whether resubmitting may
help.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class RegistrationError(HTTPException):
    error_code = "REGISTRATION_ERROR"
    retryable = False
    message = "Errore sconosciuto"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.message,
        )

    def payload(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.detail,
            "error_code": self.error_code,
            "retryable": self.retryable,
        }


class NoActiveChampionship(RegistrationError):
    error_code = "NO_ACTIVE_CHAMPIONSHIP"
    message = "Nessun campionato attivo trovato. Contatta il comitato."
    status_code_default = status.HTTP_404_NOT_FOUND


class BibAllocationFailed(RegistrationError):
    error_code = "BIB_ALLOCATION_FAILED"
    retryable = True
    message = "Errore nella generazione del pettorale. Riprova."
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE


class AlreadyRegistered(RegistrationError):
    error_code = "ALREADY_REGISTERED"
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, bib_number: str):
        self.bib_number = bib_number
        super().__init__(
            f"Questo atleta è già iscritto al campionato con pettorale n° {bib_number}."
        )

    def payload(self) -> Dict[str, Any]:
        data = super().payload()
        data["bib_number"] = self.bib_number
        return data


class MemberPersistenceFailed(RegistrationError):
    error_code = "MEMBER_PERSISTENCE_FAILED"
    retryable = True
    message = "Errore durante il salvataggio dell'atleta. Riprova più tardi."
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE


class RegistrationPersistenceFailed(RegistrationError):
    error_code = "REGISTRATION_PERSISTENCE_FAILED"
    retryable = True
    message = "Errore durante l'iscrizione al campionato. Riprova più tardi."
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE


class UnknownRegistrationError(RegistrationError):
    error_code = "UNKNOWN_ERROR"


class PartialRaceFanoutFailure(Exception):
    """Per-race rows could not be written. Logged, never shown to the athlete."""

    def __init__(self, championship_id: int, member_id: int, cause, race_ids: Optional[List[int]] = None):
        self.championship_id = championship_id
        self.member_id = member_id
        self.cause = cause
        self.race_ids = race_ids or []
        super().__init__(
            f"Race fan-out failed for member {member_id} "
            f"in championship {championship_id}: {cause}"
        )
