from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.championship import Championship
from app.db.models.event import Event


def get_active_championship(db: Session) -> Optional[Championship]:
    """
    The championship public registrations go to: flagged active, most
    recently created wins (highest id on equal timestamps).
    """
    return db.execute(
        select(Championship)
        .where(Championship.is_active.is_(True))
        .order_by(Championship.created_at.desc(), Championship.id.desc())
        .limit(1)
    ).scalar_one_or_none()


def list_active_races(db: Session, championship_id: int) -> List[Event]:
    return list(db.execute(
        select(Event)
        .where(Event.championship_id == championship_id, Event.is_active.is_(True))
        .order_by(Event.event_date, Event.id)
    ).scalars().all())
