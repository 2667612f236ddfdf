"""
Tests for bib number allocation
"""
import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import BibAllocationFailed
from app.db.models.championship import Championship
from app.db.models.championship_registration import ChampionshipRegistration, RegistrationStatus
from app.db.models.event import Event
from app.db.models.event_registration import EventRegistration
from app.db.models.member import Member
from app.services.bib_numbers import (
    BibScope,
    allocate_next_bib_numbers,
    compute_next_bib_numbers,
    format_bib_number,
    is_bib_number_assigned,
    is_valid_bib_number,
)


class TestComputeNextBibNumbers:

    def test_numeric_max_not_lexicographic(self):
        assert compute_next_bib_numbers(["2", "9", "10"], 1) == ["011"]

    def test_empty_scope_starts_at_one(self):
        assert compute_next_bib_numbers([], 3) == ["001", "002", "003"]

    def test_non_numeric_values_are_ignored(self):
        assert compute_next_bib_numbers(["N/A", "005", None, "", "abc"], 1) == ["006"]

    def test_only_non_numeric_values(self):
        assert compute_next_bib_numbers(["N/A", "TBD"], 2) == ["001", "002"]

    def test_padded_and_unpadded_values_mix(self):
        assert compute_next_bib_numbers(["007", "12", "011"], 1) == ["013"]

    def test_large_numbers_are_not_truncated(self):
        assert compute_next_bib_numbers(["998"], 3) == ["999", "1000", "1001"]

    def test_only_leading_digits_count(self):
        # "12A" still reserves 12; "1_000" is 1, not one thousand
        assert compute_next_bib_numbers(["12A", "3"], 1) == ["013"]
        assert compute_next_bib_numbers(["1_000"], 1) == ["002"]
        assert compute_next_bib_numbers([" 8 "], 1) == ["009"]

    def test_count_must_be_positive(self):
        with pytest.raises(ValueError):
            compute_next_bib_numbers([], 0)


class TestBibHelpers:

    @pytest.mark.parametrize("value,expected", [
        ("7", "007"),
        ("042", "042"),
        ("1234", "1234"),
        ("A12", "A12"),
        ("12A", "012"),
    ])
    def test_format_bib_number(self, value, expected):
        assert format_bib_number(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("001", True),
        ("15", True),
        ("0", False),
        ("-3", False),
        ("", False),
        ("   ", False),
        ("N/A", False),
        ("7B", True),
        (None, False),
    ])
    def test_is_valid_bib_number(self, value, expected):
        assert is_valid_bib_number(value) is expected


def _member(db_session, number):
    member = Member(first_name="Atleta", last_name=number, membership_number=number)
    db_session.add(member)
    db_session.flush()
    return member


class TestAllocateNextBibNumbers:

    def test_empty_championship(self, db_session, championship):
        bibs = allocate_next_bib_numbers(db_session, BibScope.CHAMPIONSHIP, championship.id, 3)
        assert bibs == ["001", "002", "003"]

    def test_cancelled_registrations_keep_their_bib(self, db_session, championship):
        db_session.add_all([
            ChampionshipRegistration(
                championship_id=championship.id, member_id=_member(db_session, "A1").id,
                bib_number="9", status=RegistrationStatus.CONFIRMED,
            ),
            ChampionshipRegistration(
                championship_id=championship.id, member_id=_member(db_session, "A2").id,
                bib_number="012", status=RegistrationStatus.CANCELLED,
            ),
        ])
        db_session.commit()

        assert allocate_next_bib_numbers(db_session, BibScope.CHAMPIONSHIP, championship.id) == ["013"]

    def test_scopes_are_independent(self, db_session, championship):
        other = Championship(name="Cross 2026", year=2026, is_active=False)
        db_session.add(other)
        db_session.flush()
        db_session.add(ChampionshipRegistration(
            championship_id=other.id, member_id=_member(db_session, "B1").id, bib_number="050",
        ))
        db_session.commit()

        assert allocate_next_bib_numbers(db_session, BibScope.CHAMPIONSHIP, championship.id) == ["001"]
        assert allocate_next_bib_numbers(db_session, BibScope.CHAMPIONSHIP, other.id) == ["051"]

    def test_standalone_event_scope(self, db_session):
        from datetime import date

        event = Event(title="Corsa di Natale", event_date=date(2026, 12, 20))
        db_session.add(event)
        db_session.flush()
        db_session.add_all([
            EventRegistration(event_id=event.id, member_id=_member(db_session, "C1").id, bib_number="010"),
            EventRegistration(event_id=event.id, member_id=_member(db_session, "C2").id, bib_number=None),
        ])
        db_session.commit()

        assert allocate_next_bib_numbers(db_session, BibScope.EVENT, event.id, 2) == ["011", "012"]

    def test_lock_is_accepted(self, db_session, championship):
        assert allocate_next_bib_numbers(db_session, BibScope.CHAMPIONSHIP, championship.id, lock=True) == ["001"]

    def test_store_failure_is_surfaced(self):
        class BrokenSession:
            def execute(self, *args, **kwargs):
                raise OperationalError("SELECT bib_number", {}, Exception("connection refused"))

        with pytest.raises(BibAllocationFailed) as exc_info:
            allocate_next_bib_numbers(BrokenSession(), BibScope.CHAMPIONSHIP, 1)

        assert exc_info.value.retryable is True

    def test_is_bib_number_assigned(self, db_session, championship):
        db_session.add(ChampionshipRegistration(
            championship_id=championship.id, member_id=_member(db_session, "D1").id, bib_number="004",
        ))
        db_session.commit()

        assert is_bib_number_assigned(db_session, BibScope.CHAMPIONSHIP, championship.id, "004")
        assert not is_bib_number_assigned(db_session, BibScope.CHAMPIONSHIP, championship.id, "005")
