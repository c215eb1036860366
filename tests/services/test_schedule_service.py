"""Tests for schedule slot management."""

from datetime import datetime, timedelta

import pytest

from conftest import JST, jst
from golflesson.exceptions import NotFoundError, SlotInUseError, ValidationError


def test_create_derives_end_from_plan(app, plans):
    schedule = app.schedules.create("plan-indoor", jst(2025, 3, 15, 10, 0), location="恵比寿スタジオ", note="手袋持参")

    assert schedule.id.startswith("sch-")
    assert schedule.end_at - schedule.start_at == timedelta(minutes=50)
    assert schedule.is_available is True
    assert schedule.is_blocked is False
    assert schedule.max_attendees == 1
    assert schedule.lesson_plan.price == 13000
    assert schedule.location == "恵比寿スタジオ"
    assert app.schedules.get(schedule.id) == schedule

def test_naive_start_is_tokyo_time(app, plans):
    schedule = app.schedules.create("plan-indoor", datetime(2025, 3, 15, 10, 0))
    assert schedule.start_at == jst(2025, 3, 15, 10, 0)
    assert schedule.start_at.utcoffset() == timedelta(hours=9)

def test_round_lesson_with_tee_off(app, plans):
    schedule = app.schedules.create("plan-round-30000", jst(2025, 3, 20, 8, 0), tee_off_time="8:30")
    assert schedule.tee_off_time == "8:30"
    assert schedule.end_at == jst(2025, 3, 20, 13, 0)
    assert schedule.max_attendees == 4

def test_tee_off_only_for_round_lessons(app, plans):
    with pytest.raises(ValidationError):
        app.schedules.create("plan-indoor", jst(2025, 3, 15, 10, 0), tee_off_time="8:30")

def test_create_unknown_plan(app, plans):
    with pytest.raises(NotFoundError):
        app.schedules.create("plan-missing", jst(2025, 3, 15, 10, 0))
    assert app.schedules.list() == []

def test_delete(app, make_schedule):
    schedule = make_schedule()
    app.schedules.delete(schedule.id)
    with pytest.raises(NotFoundError):
        app.schedules.get(schedule.id)

def test_delete_slot_with_active_reservation(app, make_schedule, book):
    schedule = make_schedule()
    reservation_id = book(schedule.id)

    with pytest.raises(SlotInUseError) as exc_info:
        app.schedules.delete(schedule.id)
    assert exc_info.value.details["reservation_id"] == reservation_id

    # A cancelled reservation no longer holds the slot
    app.reservations.reject(reservation_id)
    app.schedules.delete(schedule.id)

def test_block_and_unblock(app, make_schedule):
    schedule = make_schedule()

    blocked = app.schedules.set_availability(schedule.id, False)
    assert blocked.is_blocked is True
    assert blocked.is_available is False

    opened = app.schedules.set_availability(schedule.id, True)
    assert opened.is_blocked is False
    assert opened.is_available is True

def test_unblock_keeps_booked_slot_unavailable(app, make_schedule, book):
    schedule = make_schedule()
    book(schedule.id)
    app.schedules.set_availability(schedule.id, False)

    assert app.schedules.set_availability(schedule.id, True).is_available is False

def test_cancelled_booking_on_blocked_slot_stays_closed(app, make_schedule, book):
    schedule = make_schedule()
    reservation_id = book(schedule.id)
    app.schedules.set_availability(schedule.id, False)
    app.reservations.reject(reservation_id)
    assert app.schedules.get(schedule.id).is_available is False

def test_list_filters_and_order(app, make_schedule, book):
    late = make_schedule(days_ahead=12)
    early = make_schedule(days_ahead=8)
    booked = make_schedule(days_ahead=10)
    book(booked.id)

    assert [s.id for s in app.schedules.list()] == [early.id, booked.id, late.id]
    assert [s.id for s in app.schedules.list(available_only=True)] == [early.id, late.id]

    window = app.schedules.list(start=datetime(2025, 3, 10, 0, 0), end=datetime(2025, 3, 13, 10, 0, tzinfo=JST))
    assert [s.id for s in window] == [booked.id]
