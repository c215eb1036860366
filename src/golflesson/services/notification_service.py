"""Notification service for golf lesson application."""

from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError
from concurrent.futures import as_completed
from dataclasses import dataclass, field
from typing import Protocol

from golflesson.config.error_aggregator import aggregate_error
from golflesson.exceptions import NotificationError
from golflesson.models.reservation import Reservation
from golflesson.services.cancellation_policy import PolicyDecision
from golflesson.services.email_templates import EmailMessage, EmailTemplates
from golflesson.services.mail_service import SendResult
from golflesson.utils.logging_utils import EnhancedLoggerMixin


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> SendResult: ...

@dataclass
class DeliveryReport:
    """Per-recipient outcome of a notification."""
    sent: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: "DeliveryReport") -> "DeliveryReport":
        return DeliveryReport(
            sent=self.sent + other.sent,
            failed={**self.failed, **other.failed},
        )

class NotificationService(EnhancedLoggerMixin):
    """Sends reservation emails to customers and admins.

    Delivery is best effort: failures are logged and reported in the
    returned DeliveryReport, never raised.
    """

    def __init__(
        self,
        mailer: Mailer,
        templates: EmailTemplates,
        admin_recipients: Callable[[], list[str]],
        max_workers: int = 4,
        timeout: float = 30
    ):
        super().__init__()
        self.mailer = mailer
        self.templates = templates
        self.admin_recipients = admin_recipients
        self.max_workers = max_workers
        self.timeout = timeout
        self.set_log_context(service="notification")

    def _deliver(self, to: str, message: EmailMessage) -> None:
        """Send one message, raising NotificationError on failure."""
        try:
            result = self.mailer.send(to, message.subject, message.html)
        except Exception as e:
            raise NotificationError(f"Mailer raised {type(e).__name__}: {e}", to) from e
        if not result.success:
            raise NotificationError(result.error or "Delivery failed", to)

    def _record_failure(self, report: DeliveryReport, to: str, error: Exception) -> None:
        self.warning("Notification delivery failed", error=str(error))
        aggregate_error(str(error), "notification")
        report.failed[to] = str(error)

    def notify_user(self, to: str, message: EmailMessage) -> DeliveryReport:
        report = DeliveryReport()
        if not to:
            self.warning("Customer has no email address, notification skipped", subject=message.subject)
            return report
        try:
            self._deliver(to, message)
            report.sent.append(to)
        except NotificationError as e:
            self._record_failure(report, to, e)
        return report

    def notify_admins(self, message: EmailMessage) -> DeliveryReport:
        """Send ``message`` to every admin in parallel.

        One recipient's failure never affects delivery to the others.
        """
        report = DeliveryReport()
        try:
            recipients = self.admin_recipients()
        except Exception as e:
            self.error("Failed to resolve admin recipients", exc_info=e)
            return report

        if not recipients:
            self.warning("No admin recipients configured", subject=message.subject)
            return report

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(recipients)))
        future_to_recipient = {
            executor.submit(self._deliver, to, message): to
            for to in recipients
        }
        pending = set(future_to_recipient)
        try:
            for future in as_completed(future_to_recipient, timeout=self.timeout):
                pending.discard(future)
                self._collect(report, future_to_recipient[future], future)
        except TimeoutError:
            for future in pending:
                to = future_to_recipient[future]
                if future.done():
                    self._collect(report, to, future)
                else:
                    self._record_failure(
                        report, to, NotificationError(f"Delivery timed out after {self.timeout}s", to)
                    )
        finally:
            # Hung sends keep running in the background; nothing waits for them
            executor.shutdown(wait=False, cancel_futures=True)

        self.debug("Admin notification finished", sent=len(report.sent), failed=len(report.failed))
        return report

    def _collect(self, report: DeliveryReport, to: str, future: Future) -> None:
        try:
            future.result()
            report.sent.append(to)
        except NotificationError as e:
            self._record_failure(report, to, e)

    def booking_requested(self, reservation: Reservation) -> DeliveryReport:
        customer = self.notify_user(reservation.user_email, self.templates.reservation_request(reservation))
        admins = self.notify_admins(self.templates.admin_new_reservation(reservation))
        return customer.merge(admins)

    def reservation_confirmed(self, reservation: Reservation) -> DeliveryReport:
        return self.notify_user(reservation.user_email, self.templates.reservation_confirmed(reservation))

    def reservation_rejected(self, reservation: Reservation) -> DeliveryReport:
        return self.notify_user(reservation.user_email, self.templates.reservation_rejected(reservation))

    def reservation_cancelled(
        self,
        reservation: Reservation,
        decision: PolicyDecision | None = None
    ) -> DeliveryReport:
        return self.notify_user(
            reservation.user_email,
            self.templates.reservation_cancelled(reservation, decision)
        )

    def cancellation_requested(self, reservation: Reservation, decision: PolicyDecision) -> DeliveryReport:
        customer = self.notify_user(
            reservation.user_email,
            self.templates.cancellation_requested(reservation, decision)
        )
        admins = self.notify_admins(self.templates.admin_cancellation_requested(reservation, decision))
        return customer.merge(admins)
