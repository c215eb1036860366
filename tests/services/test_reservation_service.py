"""Tests for booking, admin decisions and customer cancellation."""

import threading
from dataclasses import replace

import pytest

from golflesson.exceptions import (
    AgreementRequiredError,
    AuthError,
    InvalidStateTransitionError,
    NotCancellableError,
    NotFoundError,
    SlotUnavailableError,
    ValidationError,
)
from golflesson.models.reservation import FeeTier, ReservationStatus
from golflesson.services.reservation_service import COMPLETED_MESSAGE, REQUESTED_MESSAGE
from golflesson.storage.repositories import RESERVATIONS, SCHEDULES


def _state(store):
    return store.snapshot(RESERVATIONS, SCHEDULES)

# Booking

def test_create_reservation(app, admin, make_schedule, book, mailer, clock):
    """A booking is PENDING, copies the slot details and closes the slot."""
    schedule = make_schedule(days_ahead=10)
    reservation_id = book(schedule.id, concern="スライスに悩んでいます", agreed_photo_post=True)

    reservation = app.reservations.get(reservation_id)
    assert reservation_id.startswith("rsv-")
    assert reservation.status is ReservationStatus.PENDING
    assert reservation.user_name == "山田太郎"
    assert reservation.user_email == "taro@example.com"
    assert reservation.agreed_cancel_policy is True
    assert reservation.agreed_photo_post is True
    assert reservation.concern == "スライスに悩んでいます"
    assert reservation.created_at == clock.now
    assert reservation.receipt.plan_name == schedule.lesson_plan.name
    assert reservation.receipt.price == 13000
    assert reservation.receipt.start_at == schedule.start_at

    assert app.schedules.get(schedule.id).is_available is False

    assert mailer.subjects_for("taro@example.com")[0].startswith("【予約リクエスト受付】")
    assert mailer.subjects_for("mayumi@example.com")[0].startswith("【新規予約リクエスト】")
    assert mailer.subjects_for("owner@example.com")[0].startswith("【新規予約リクエスト】")

def test_booking_taken_slot_changes_nothing(app, store, make_schedule, book):
    schedule = make_schedule()
    book(schedule.id)
    app.accounts.register("user-2", "hanako@example.com", "鈴木花子")
    before = _state(store)

    with pytest.raises(SlotUnavailableError) as exc_info:
        book(schedule.id, user_id="user-2")

    assert exc_info.value.user_message == "この枠は既に予約されています"
    assert _state(store) == before

def test_booking_requires_policy_agreement(store, make_schedule, book):
    schedule = make_schedule()
    before = _state(store)

    with pytest.raises(AgreementRequiredError) as exc_info:
        book(schedule.id, agreed_cancel_policy=False)

    assert isinstance(exc_info.value, ValidationError)
    assert _state(store) == before

def test_booking_requires_user(app, make_schedule):
    schedule = make_schedule()
    with pytest.raises(AuthError):
        app.reservations.create_reservation(None, schedule.id, agreed_cancel_policy=True)

def test_booking_unknown_ids(app, customer, make_schedule, book):
    schedule = make_schedule()
    with pytest.raises(NotFoundError):
        book("sch-missing")
    with pytest.raises(NotFoundError):
        app.reservations.create_reservation("nobody", schedule.id, agreed_cancel_policy=True)

def test_booking_blocked_slot(app, make_schedule, book):
    schedule = make_schedule()
    app.schedules.set_availability(schedule.id, False)
    with pytest.raises(SlotUnavailableError):
        book(schedule.id)

def test_receipt_survives_plan_changes(app, plans, make_schedule, book):
    """Later price changes never reach an existing reservation."""
    schedule = make_schedule()
    reservation_id = book(schedule.id)
    app.plans.save_plan(replace(plans["plan-indoor"], price=15000))
    assert app.reservations.get(reservation_id).receipt.price == 13000

def test_concurrent_bookings_single_winner(app, make_schedule):
    """Only one of many simultaneous requests for a slot succeeds."""
    schedule = make_schedule()
    for i in range(8):
        app.accounts.register(f"racer-{i}", f"racer{i}@example.com", f"Racer {i}")

    results: list[str] = []
    barrier = threading.Barrier(8)

    def attempt(user_id):
        barrier.wait()
        try:
            app.reservations.create_reservation(user_id, schedule.id, agreed_cancel_policy=True)
            results.append("ok")
        except SlotUnavailableError:
            results.append("taken")

    threads = [threading.Thread(target=attempt, args=(f"racer-{i}",)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count("ok") == 1
    assert results.count("taken") == 7
    assert len(app.reservations.list_reservations()) == 1

def test_notification_failure_keeps_reservation(app, make_schedule, book, mailer):
    mailer.raise_error = True
    schedule = make_schedule()
    reservation_id = book(schedule.id)
    assert app.reservations.get(reservation_id).status is ReservationStatus.PENDING

# Admin decisions

def test_approve(app, make_schedule, book, mailer):
    reservation_id = book(make_schedule().id)
    reservation = app.reservations.approve(reservation_id)

    assert reservation.status is ReservationStatus.CONFIRMED
    assert app.reservations.get(reservation_id).status is ReservationStatus.CONFIRMED
    assert any(s.startswith("【予約確定】") for s in mailer.subjects_for("taro@example.com"))

    with pytest.raises(InvalidStateTransitionError):
        app.reservations.approve(reservation_id)

def test_reject_reopens_slot(app, make_schedule, book, mailer, clock):
    schedule = make_schedule()
    reservation_id = book(schedule.id)
    clock.advance(hours=2)

    reservation = app.reservations.reject(reservation_id, "講師都合のため")

    assert reservation.status is ReservationStatus.CANCELLED
    assert reservation.cancelled_at == clock.now
    assert reservation.cancel_reason == "講師都合のため"
    assert app.schedules.get(schedule.id).is_available is True
    assert any(s.startswith("【予約不成立】") for s in mailer.subjects_for("taro@example.com"))

def test_reject_only_pending(app, make_schedule, book):
    reservation_id = book(make_schedule().id)
    app.reservations.approve(reservation_id)
    with pytest.raises(InvalidStateTransitionError):
        app.reservations.reject(reservation_id)

def test_terminal_reservations_reject_changes(app, make_schedule, book):
    cancelled_id = book(make_schedule(days_ahead=10).id)
    app.reservations.reject(cancelled_id)

    completed_id = book(make_schedule(days_ahead=11).id)
    app.reservations.approve(completed_id)
    app.reservations.complete(completed_id)

    for reservation_id in (cancelled_id, completed_id):
        with pytest.raises(InvalidStateTransitionError):
            app.reservations.approve(reservation_id)
        with pytest.raises(InvalidStateTransitionError):
            app.reservations.complete(reservation_id)
        with pytest.raises(NotCancellableError):
            app.reservations.request_cancellation(reservation_id)

def test_complete_requires_confirmed(app, make_schedule, book):
    reservation_id = book(make_schedule().id)
    with pytest.raises(InvalidStateTransitionError):
        app.reservations.complete(reservation_id)
    app.reservations.approve(reservation_id)
    assert app.reservations.complete(reservation_id).status is ReservationStatus.COMPLETED

def test_unknown_reservation(app):
    with pytest.raises(NotFoundError):
        app.reservations.approve("rsv-missing")

# Customer cancellation

def test_free_cancellation_ten_days_ahead(app, make_schedule, book, mailer, clock):
    schedule = make_schedule(days_ahead=10)
    reservation_id = book(schedule.id)
    app.reservations.approve(reservation_id)

    outcome = app.reservations.request_cancellation(reservation_id, reason="仕事の都合")

    assert outcome.cancelled is True
    assert outcome.status is ReservationStatus.CANCELLED
    assert outcome.decision.tier is FeeTier.FREE
    assert outcome.message == COMPLETED_MESSAGE

    reservation = app.reservations.get(reservation_id)
    assert reservation.status is ReservationStatus.CANCELLED
    assert reservation.cancelled_at == clock.now
    assert reservation.cancel_reason == "仕事の都合"
    assert reservation.cancellation_request is None
    assert app.schedules.get(schedule.id).is_available is True
    assert any(s.startswith("【キャンセル完了】") for s in mailer.subjects_for("taro@example.com"))

def test_half_fee_cancellation_five_days_ahead(app, admin, make_schedule, book, mailer):
    schedule = make_schedule(days_ahead=5)
    reservation_id = book(schedule.id)
    app.reservations.approve(reservation_id)

    outcome = app.reservations.request_cancellation(reservation_id, reason="体調不良")

    assert outcome.cancelled is False
    assert outcome.status is ReservationStatus.CONFIRMED
    assert outcome.message == REQUESTED_MESSAGE
    assert outcome.decision.tier is FeeTier.HALF
    assert outcome.decision.fee_amount == 6500

    reservation = app.reservations.get(reservation_id)
    assert reservation.status is ReservationStatus.CONFIRMED
    assert reservation.cancellation_request.tier is FeeTier.HALF
    assert reservation.cancellation_request.fee_percent == 50
    assert reservation.cancellation_request.fee_amount == 6500
    assert app.schedules.get(schedule.id).is_available is False

    assert any(s.startswith("【キャンセルリクエスト受付】") for s in mailer.subjects_for("taro@example.com"))
    assert any(s.startswith("【キャンセルリクエスト】") for s in mailer.subjects_for("mayumi@example.com"))

def test_full_fee_cancellation_same_day(app, make_schedule, book):
    schedule = make_schedule(days_ahead=0, hour=18)
    reservation_id = book(schedule.id)
    app.reservations.approve(reservation_id)

    outcome = app.reservations.request_cancellation(reservation_id)

    assert outcome.decision.tier is FeeTier.FULL
    assert outcome.decision.days_until == 0
    assert outcome.decision.fee_amount == 13000
    assert app.reservations.get(reservation_id).cancellation_request.tier is FeeTier.FULL

def test_approve_cancellation(app, make_schedule, book, mailer, clock):
    schedule = make_schedule(days_ahead=5)
    reservation_id = book(schedule.id)
    app.reservations.approve(reservation_id)
    app.reservations.request_cancellation(reservation_id, reason="体調不良")
    clock.advance(days=1)

    reservation = app.reservations.approve_cancellation(reservation_id)

    assert reservation.status is ReservationStatus.CANCELLED
    assert reservation.cancelled_at == clock.now
    assert reservation.cancel_reason == "体調不良"
    assert app.schedules.get(schedule.id).is_available is True
    assert sum(s.startswith("【キャンセル完了】") for s in mailer.subjects_for("taro@example.com")) == 1
    assert app.reservations.list_pending_cancellations() == []

def test_approve_cancellation_requires_request(app, make_schedule, book):
    reservation_id = book(make_schedule().id)
    app.reservations.approve(reservation_id)
    with pytest.raises(InvalidStateTransitionError):
        app.reservations.approve_cancellation(reservation_id)

def test_second_request_is_rejected(app, make_schedule, book):
    reservation_id = book(make_schedule(days_ahead=4).id)
    app.reservations.approve(reservation_id)
    app.reservations.request_cancellation(reservation_id)
    with pytest.raises(NotCancellableError):
        app.reservations.request_cancellation(reservation_id)

def test_dismiss_cancellation_request(app, make_schedule, book):
    reservation_id = book(make_schedule(days_ahead=4).id)
    app.reservations.approve(reservation_id)
    app.reservations.request_cancellation(reservation_id)

    reservation = app.reservations.dismiss_cancellation_request(reservation_id)

    assert reservation.status is ReservationStatus.CONFIRMED
    assert reservation.cancellation_request is None
    # The customer may ask again
    assert app.reservations.request_cancellation(reservation_id).cancelled is False

def test_preview_has_no_side_effects(app, store, make_schedule, book, mailer):
    reservation_id = book(make_schedule(days_ahead=3).id)
    app.reservations.approve(reservation_id)
    before = _state(store)
    sent = len(mailer.sent)

    decision = app.reservations.preview_cancellation(reservation_id)

    assert decision.tier is FeeTier.HALF
    assert decision.fee_amount == 6500
    assert _state(store) == before
    assert len(mailer.sent) == sent

def test_pending_reservation_cancellation(app, make_schedule, book):
    """PENDING bookings follow the same fee rules."""
    free_id = book(make_schedule(days_ahead=9).id)
    assert app.reservations.request_cancellation(free_id).cancelled is True

    late_id = book(make_schedule(days_ahead=2).id)
    outcome = app.reservations.request_cancellation(late_id)
    assert outcome.cancelled is False
    assert outcome.status is ReservationStatus.PENDING

    # Resolved by the instructor declining the booking
    assert app.reservations.reject(late_id).status is ReservationStatus.CANCELLED

# Queries

def test_list_reservations(app, customer, make_schedule, book):
    app.accounts.register("user-2", "hanako@example.com", "鈴木花子")
    first = book(make_schedule(days_ahead=8).id)
    second = book(make_schedule(days_ahead=12).id)
    other = book(make_schedule(days_ahead=9).id, user_id="user-2")
    app.reservations.approve(first)

    assert [r.id for r in app.reservations.list_reservations()] == [second, other, first]
    assert [r.id for r in app.reservations.list_reservations(user_id=customer.id)] == [second, first]
    assert [r.id for r in app.reservations.list_reservations(status=ReservationStatus.CONFIRMED)] == [first]

def test_list_pending_cancellations(app, make_schedule, book, clock):
    early = book(make_schedule(days_ahead=4).id)
    late = book(make_schedule(days_ahead=5).id)
    for reservation_id in (early, late):
        app.reservations.approve(reservation_id)

    app.reservations.request_cancellation(late)
    clock.advance(minutes=5)
    app.reservations.request_cancellation(early)

    assert [r.id for r in app.reservations.list_pending_cancellations()] == [late, early]
