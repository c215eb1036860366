"""Tests for reservation notifications."""

import threading
import time

from conftest import FakeMailer
from golflesson.services.email_templates import EmailMessage, EmailTemplates
from golflesson.services.mail_service import SendResult
from golflesson.services.notification_service import NotificationService


MESSAGE = EmailMessage(subject="件名", html="<p>本文</p>")

def _service(mailer, admins):
    return NotificationService(mailer, EmailTemplates("https://lesson.example.com"), lambda: admins)

def test_notify_admins_isolates_failures():
    """One admin's failed delivery does not stop the others."""
    mailer = FakeMailer()
    mailer.fail_for = {"broken@example.com"}
    admins = ["a@example.com", "broken@example.com", "b@example.com"]

    report = _service(mailer, admins).notify_admins(MESSAGE)

    assert sorted(report.sent) == ["a@example.com", "b@example.com"]
    assert list(report.failed) == ["broken@example.com"]
    assert report.ok is False
    assert sorted(to for to, _, _ in mailer.sent) == ["a@example.com", "b@example.com"]

def test_mailer_exceptions_are_reported_not_raised():
    mailer = FakeMailer()
    mailer.raise_error = True

    report = _service(mailer, ["a@example.com"]).notify_admins(MESSAGE)

    assert report.sent == []
    assert "mail API unreachable" in report.failed["a@example.com"]

def test_no_admin_recipients():
    mailer = FakeMailer()
    report = _service(mailer, []).notify_admins(MESSAGE)
    assert report.ok is True
    assert mailer.sent == []

def test_admin_lookup_failure():
    def broken():
        raise RuntimeError("directory unavailable")

    mailer = FakeMailer()
    service = NotificationService(mailer, EmailTemplates("https://lesson.example.com"), broken)
    assert service.notify_admins(MESSAGE).sent == []

def test_notify_user_without_address():
    mailer = FakeMailer()
    report = _service(mailer, []).notify_user("", MESSAGE)
    assert report.sent == []
    assert report.ok is True
    assert mailer.sent == []

def test_booking_requested_merges_reports(app, admin, make_schedule, book, mailer):
    mailer.fail_for = {"owner@example.com"}
    reservation = app.reservations.get(book(make_schedule().id))

    report = app.notifications.booking_requested(reservation)

    assert sorted(report.sent) == ["mayumi@example.com", "taro@example.com"]
    assert list(report.failed) == ["owner@example.com"]

class StalledMailer(FakeMailer):
    """Mailer that hangs for one address until released."""

    def __init__(self, stalled: str):
        super().__init__()
        self.stalled = stalled
        self.release = threading.Event()

    def send(self, to: str, subject: str, html: str) -> SendResult:
        if to == self.stalled:
            self.release.wait(timeout=10)
        return super().send(to, subject, html)

def test_stalled_admin_delivery_times_out():
    mailer = StalledMailer("slow@example.com")
    service = NotificationService(
        mailer,
        EmailTemplates("https://lesson.example.com"),
        lambda: ["slow@example.com", "fast@example.com"],
        timeout=0.2
    )

    try:
        started = time.monotonic()
        report = service.notify_admins(MESSAGE)
        elapsed = time.monotonic() - started
    finally:
        mailer.release.set()

    assert elapsed < 1.0
    assert report.sent == ["fast@example.com"]
    assert "timed out after 0.2s" in report.failed["slow@example.com"]
