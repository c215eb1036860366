"""Tests for the iCalendar export."""

import pytest
from icalendar import Calendar

from golflesson.exceptions import NotFoundError


def test_build_calendar_active_reservations_only(app, customer, make_schedule, book):
    confirmed = book(make_schedule(days_ahead=8).id)
    app.reservations.approve(confirmed)
    pending = book(make_schedule(days_ahead=9, plan_id="plan-round-28000", tee_off_time="9:12").id)
    cancelled = book(make_schedule(days_ahead=10).id)
    app.reservations.reject(cancelled)

    calendar = app.calendar.build_calendar(customer.id)
    events = calendar.walk('vevent')

    assert [str(e['uid']) for e in events] == [f"{confirmed}@golflesson", f"{pending}@golflesson"]
    assert str(events[0]['status']) == 'CONFIRMED'
    assert str(events[1]['status']) == 'TENTATIVE'
    assert str(events[1]['summary']) == "ラウンドレッスン（承認待ち）"
    assert "ティーオフ: 9:12" in str(events[1]['description'])
    assert str(calendar['x-wr-calname']) == "ゴルフレッスン - 山田太郎"

def test_event_times(app, customer, make_schedule, book):
    schedule = make_schedule(days_ahead=8)
    book(schedule.id)

    [event] = app.calendar.build_calendar(customer.id).walk('vevent')

    assert event['dtstart'].dt == schedule.start_at
    assert event['dtend'].dt == schedule.end_at

def test_write_calendar(app, customer, make_schedule, book, tmp_path):
    book(make_schedule(days_ahead=8).id)
    calendar = app.calendar.build_calendar(customer.id)

    path = app.calendar.write_calendar(calendar, tmp_path / "ics" / "user-1.ics")

    parsed = Calendar.from_ical(path.read_bytes())
    assert len(parsed.walk('vevent')) == 1
    assert str(parsed['prodid']) == '-//Golf Lesson//JA'

def test_unknown_account(app):
    with pytest.raises(NotFoundError):
        app.calendar.build_calendar("ghost")
