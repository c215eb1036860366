"""Tests for the customer karte."""

from datetime import date

import pytest

from golflesson.exceptions import NotFoundError, ValidationError
from golflesson.models.karte import DrillStatus
from golflesson.models.reservation import ReservationStatus


def test_add_and_progress_drill(app, customer, clock):
    drill = app.karte.add_drill(
        customer.id,
        " アプローチ練習 ",
        description="30ヤードを10球",
        due_date=date(2025, 3, 15),
    )
    assert drill.id.startswith("drill-")
    assert drill.title == "アプローチ練習"
    assert drill.status is DrillStatus.ASSIGNED

    clock.advance(days=2)
    updated = app.karte.update_drill_status(drill.id, DrillStatus.IN_PROGRESS)
    assert updated.status is DrillStatus.IN_PROGRESS
    assert updated.updated_at == clock.now

    [stored] = app.karte.list_drills(customer.id)
    assert stored.due_date == date(2025, 3, 15)
    assert stored.status is DrillStatus.IN_PROGRESS

def test_drill_requires_title(app, customer):
    with pytest.raises(ValidationError):
        app.karte.add_drill(customer.id, "   ")

def test_admins_have_no_karte(app, admin):
    with pytest.raises(NotFoundError):
        app.karte.add_drill(admin.id, "パター練習")
    with pytest.raises(NotFoundError):
        app.karte.get_customer_detail(admin.id)

def test_delete_drill(app, customer):
    drill = app.karte.add_drill(customer.id, "素振り")
    app.karte.delete_drill(drill.id)
    assert app.karte.list_drills(customer.id) == []
    with pytest.raises(NotFoundError):
        app.karte.delete_drill(drill.id)

def test_notes_visibility_and_order(app, customer, clock):
    private = app.karte.add_note(customer.id, "グリップが強すぎる")
    clock.advance(minutes=10)
    shared = app.karte.add_note(customer.id, "次回はバンカー練習", is_private=False)

    assert [n.id for n in app.karte.list_notes(customer.id)] == [shared.id, private.id]
    assert [n.id for n in app.karte.list_notes(customer.id, include_private=False)] == [shared.id]

    app.karte.delete_note(private.id)
    assert [n.id for n in app.karte.list_notes(customer.id)] == [shared.id]

def test_note_requires_content(app, customer):
    with pytest.raises(ValidationError):
        app.karte.add_note(customer.id, "")

def test_customer_detail(app, customer, make_schedule, book):
    confirmed = book(make_schedule(days_ahead=8).id)
    app.reservations.approve(confirmed)
    rejected = book(make_schedule(days_ahead=9).id)
    app.reservations.reject(rejected)
    app.karte.add_drill(customer.id, "ドリル")
    app.karte.add_note(customer.id, "メモ")

    detail = app.karte.get_customer_detail(customer.id)

    assert detail.account.id == customer.id
    assert [r.id for r in detail.reservations] == [rejected, confirmed]
    assert detail.status_counts[ReservationStatus.CONFIRMED] == 1
    assert detail.status_counts[ReservationStatus.CANCELLED] == 1
    assert detail.status_counts[ReservationStatus.PENDING] == 0
    assert len(detail.drills) == 1
    assert len(detail.notes) == 1

def test_reservation_counts(app, customer, make_schedule, book):
    app.accounts.register("user-2", "hanako@example.com", "鈴木花子")
    book(make_schedule(days_ahead=8).id)
    book(make_schedule(days_ahead=9).id)
    book(make_schedule(days_ahead=10).id, user_id="user-2")

    assert app.karte.reservation_counts() == {"user-1": 2, "user-2": 1}
