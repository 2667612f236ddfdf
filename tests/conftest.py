"""
Pytest configuration and fixtures.

Every test runs against a fresh in-memory SQLite database: tables are
created before the test and dropped after it.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token, hash_password
from app.db.session import Base, SessionLocal, engine, get_db
from app.db.models import _all
from app.db.models.championship import Championship
from app.db.models.event import Event
from app.db.models.society import AllSociety, Organization, Society
from app.db.models.user import User
from app.schemas.registration import PublicRegistrationInput
from main import app


@pytest.fixture(scope="function")
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's session."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def championship(db_session):
    champ = Championship(
        name="Corri per Modena 2026",
        year=2026,
        is_active=True,
        created_at=datetime(2026, 1, 10, tzinfo=timezone.utc),
    )
    db_session.add(champ)
    db_session.commit()
    return champ


@pytest.fixture
def races(db_session, championship):
    """Two active races and one disabled race in the championship."""
    stage_1 = Event(championship_id=championship.id, title="1a Tappa - Vignola", event_date=date(2026, 3, 8), event_number=1)
    stage_2 = Event(championship_id=championship.id, title="2a Tappa - Sassuolo", event_date=date(2026, 4, 12), event_number=2)
    cancelled = Event(championship_id=championship.id, title="Tappa annullata", event_date=date(2026, 5, 3), is_active=False)
    db_session.add_all([stage_1, stage_2, cancelled])
    db_session.commit()
    return [stage_1, stage_2]


@pytest.fixture
def society(db_session):
    soc = Society(name="Atletica Modena", society_code="MO001", organization=Organization.UISP)
    db_session.add(soc)
    db_session.commit()
    return soc


@pytest.fixture
def linked_directory_entry(db_session, society):
    """Directory entry with a different code that points at a managed society."""
    entry = AllSociety(
        name="ATL. MODENA ASD",
        society_code="FID-MO123",
        organization=Organization.FIDAL,
        managed_society_id=society.id,
    )
    db_session.add(entry)
    db_session.commit()
    return entry


@pytest.fixture
def registration_data():
    def _build(**overrides):
        data = {
            "first_name": "Mario",
            "last_name": "Rossi",
            "birth_date": "1985-04-12",
            "gender": "M",
            "membership_number": "UI123456",
            "membership_type": "UISP",
            "society_name": "Atletica Modena",
            "society_code": "MO001",
        }
        data.update(overrides)
        return data
    return _build


@pytest.fixture
def registration_input(registration_data):
    def _build(**overrides):
        return PublicRegistrationInput(**registration_data(**overrides))
    return _build


def _make_user(db_session, email, role):
    user = User(email=email, full_name="Test", hashed_password=hash_password("password123"), role=role)
    db_session.add(user)
    db_session.commit()
    return user


def _auth_headers(user):
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session):
    return _make_user(db_session, "admin@comunimo.it", "admin")


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)


@pytest.fixture
def society_admin_headers(db_session):
    return _auth_headers(_make_user(db_session, "societa@comunimo.it", "society_admin"))
