"""Reservation workflow: booking, admin decisions and customer cancellation."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from golflesson.exceptions import (
    AgreementRequiredError,
    AuthError,
    InvalidStateTransitionError,
    NotCancellableError,
    SlotUnavailableError,
    StorageError,
    handle_errors,
)
from golflesson.models.reservation import (
    BookingReceipt,
    CancellationRequest,
    Reservation,
    ReservationStatus,
)
from golflesson.services.cancellation_policy import CancellationPolicy, PolicyDecision
from golflesson.services.notification_service import NotificationService
from golflesson.services.schedule_service import ScheduleService
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.storage.repository import new_id
from golflesson.utils.logging_utils import EnhancedLoggerMixin, log_execution
from golflesson.utils.timezone_utils import utc_now


CANCELLABLE = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

COMPLETED_MESSAGE = "キャンセルが完了しました。"
REQUESTED_MESSAGE = "キャンセルリクエストを送信しました。講師の承認をお待ちください。"

@dataclass(frozen=True)
class CancellationOutcome:
    """Result of a customer cancellation."""
    reservation_id: str
    decision: PolicyDecision
    status: ReservationStatus
    cancelled: bool

    @property
    def message(self) -> str:
        return COMPLETED_MESSAGE if self.cancelled else REQUESTED_MESSAGE

class ReservationService(EnhancedLoggerMixin):
    """Reservation lifecycle.

    Every state change runs in one store transaction together with the
    slot availability update. Notifications are sent after the commit and
    never undo it.
    """

    def __init__(
        self,
        store: DocumentStore,
        schedules: ScheduleService,
        notifications: NotificationService | None = None,
        policy: CancellationPolicy | None = None,
        clock: Callable[[], datetime] = utc_now
    ):
        super().__init__()
        self.store = store
        self.schedule_service = schedules
        self.notifications = notifications
        self.policy = policy or CancellationPolicy()
        self.clock = clock
        self.reservations = repositories.reservations(store)
        self.schedules = repositories.schedules(store)
        self.accounts = repositories.accounts(store)
        self.set_log_context(service="reservations")

    def _notify(self, event: str, send: Callable[[], object]) -> None:
        if self.notifications is None:
            return
        try:
            send()
        except Exception as e:
            self.error(f"Notification for {event} failed", exc_info=e)

    # Booking

    @log_execution(level='DEBUG')
    def create_reservation(
        self,
        user_id: str | None,
        schedule_id: str,
        *,
        agreed_cancel_policy: bool,
        agreed_photo_post: bool = False,
        concern: str | None = None
    ) -> str:
        """Book a slot for a customer.

        Args:
            user_id: Acting account id
            schedule_id: Slot to book
            agreed_cancel_policy: Customer accepted the cancellation policy
            agreed_photo_post: Customer accepted photo and SNS use
            concern: Optional note from the customer

        Returns:
            Id of the new PENDING reservation

        Raises:
            AuthError: If no user id is given
            AgreementRequiredError: If the policy was not accepted
            NotFoundError: If the account or slot does not exist
            SlotUnavailableError: If the slot is not open
        """
        if not user_id:
            raise AuthError("Login required to make a reservation")
        if not agreed_cancel_policy:
            raise AgreementRequiredError()

        now = self.clock()
        with handle_errors(StorageError, "reservations", "create_reservation"):
            with self.store.transaction():
                account = self.accounts.require(user_id)
                schedule = self.schedules.require(schedule_id)
                if not schedule.is_available or self.schedule_service.active_reservation(schedule_id):
                    raise SlotUnavailableError(schedule_id)

                reservation = Reservation(
                    id=new_id("rsv"),
                    user_id=account.id,
                    user_name=account.display_name,
                    user_email=account.email,
                    schedule_id=schedule.id,
                    receipt=BookingReceipt.of(schedule),
                    status=ReservationStatus.PENDING,
                    concern=(concern or "").strip() or None,
                    agreed_cancel_policy=True,
                    agreed_photo_post=bool(agreed_photo_post),
                    created_at=now,
                    updated_at=now,
                )
                self.reservations.upsert(reservation)
                self.schedule_service.refresh_availability(schedule_id)

        self.info("Reservation requested", reservation_id=reservation.id, schedule_id=schedule_id, user_id=user_id)
        self._notify("booking", lambda: self.notifications.booking_requested(reservation))
        return reservation.id

    # Queries

    def get(self, reservation_id: str) -> Reservation:
        return self.reservations.require(reservation_id)

    def list_reservations(
        self,
        user_id: str | None = None,
        status: ReservationStatus | None = None
    ) -> list[Reservation]:
        """Reservations by lesson start, newest lesson first."""
        criteria = {}
        if user_id:
            criteria['user_id'] = user_id
        if status:
            criteria['status'] = status
        found = self.reservations.list_by(**criteria)
        return sorted(found, key=lambda r: r.receipt.start_at, reverse=True)

    def list_pending_cancellations(self) -> list[Reservation]:
        """Reservations whose customer asked to cancel inside the fee window."""
        found = self.reservations.list_by(lambda r: r.is_active and r.cancellation_requested)
        return sorted(found, key=lambda r: r.cancellation_request.requested_at)

    # Admin decisions

    def _transition(
        self,
        reservation_id: str,
        action: str,
        change: Callable[[Reservation, datetime], Reservation]
    ) -> Reservation:
        now = self.clock()
        with handle_errors(StorageError, "reservations", action):
            with self.store.transaction():
                current = self.reservations.require(reservation_id)
                updated = change(current, now)
                self.reservations.upsert(updated)
                if updated.status != current.status:
                    self.schedule_service.refresh_availability(updated.schedule_id)
        self.info(
            f"Reservation {action}",
            reservation_id=reservation_id,
            status_from=current.status.value,
            status_to=updated.status.value,
        )
        return updated

    def approve(self, reservation_id: str) -> Reservation:
        """PENDING to CONFIRMED."""
        reservation = self._transition(
            reservation_id,
            "approve",
            lambda r, now: r.transition(ReservationStatus.CONFIRMED, "approve", now),
        )
        self._notify("approve", lambda: self.notifications.reservation_confirmed(reservation))
        return reservation

    def reject(self, reservation_id: str, reason: str | None = None) -> Reservation:
        """PENDING to CANCELLED; the slot is reopened."""
        def change(r: Reservation, now: datetime) -> Reservation:
            if r.status is not ReservationStatus.PENDING:
                raise InvalidStateTransitionError(r.id, r.status.value, "reject")
            return replace(
                r.transition(ReservationStatus.CANCELLED, "reject", now),
                cancelled_at=now,
                cancel_reason=reason or None,
            )

        reservation = self._transition(reservation_id, "reject", change)
        self._notify("reject", lambda: self.notifications.reservation_rejected(reservation))
        return reservation

    def approve_cancellation(self, reservation_id: str, reason: str | None = None) -> Reservation:
        """Accept a customer's cancellation request on a CONFIRMED reservation."""
        def change(r: Reservation, now: datetime) -> Reservation:
            if r.status is not ReservationStatus.CONFIRMED or r.cancellation_request is None:
                raise InvalidStateTransitionError(r.id, r.status.value, "approve cancellation of")
            return replace(
                r.transition(ReservationStatus.CANCELLED, "approve cancellation of", now),
                cancelled_at=now,
                cancel_reason=reason or r.cancellation_request.reason,
            )

        reservation = self._transition(reservation_id, "approve_cancellation", change)
        request = reservation.cancellation_request
        decision = self.policy.evaluate(reservation.receipt.start_at, request.requested_at, reservation.receipt.price)
        self._notify("approve_cancellation", lambda: self.notifications.reservation_cancelled(reservation, decision))
        return reservation

    def complete(self, reservation_id: str) -> Reservation:
        """CONFIRMED to COMPLETED once the lesson took place."""
        def change(r: Reservation, now: datetime) -> Reservation:
            if r.status is not ReservationStatus.CONFIRMED:
                raise InvalidStateTransitionError(r.id, r.status.value, "complete")
            return r.transition(ReservationStatus.COMPLETED, "complete", now)

        return self._transition(reservation_id, "complete", change)

    def dismiss_cancellation_request(self, reservation_id: str) -> Reservation:
        """Drop a pending cancellation request; the reservation stays CONFIRMED."""
        def change(r: Reservation, now: datetime) -> Reservation:
            if r.status is not ReservationStatus.CONFIRMED or r.cancellation_request is None:
                raise InvalidStateTransitionError(r.id, r.status.value, "dismiss cancellation of")
            return replace(r, cancellation_request=None, updated_at=now)

        return self._transition(reservation_id, "dismiss_cancellation", change)

    # Customer cancellation

    def _check_cancellable(self, reservation: Reservation) -> None:
        if reservation.status not in CANCELLABLE or reservation.cancellation_requested:
            raise NotCancellableError(reservation.id, reservation.status.value)

    def preview_cancellation(self, reservation_id: str, now: datetime | None = None) -> PolicyDecision:
        """Fee the customer would pay when cancelling now. No side effects."""
        reservation = self.reservations.require(reservation_id)
        self._check_cancellable(reservation)
        return self.policy.evaluate(reservation.receipt.start_at, now or self.clock(), reservation.receipt.price)

    def request_cancellation(
        self,
        reservation_id: str,
        now: datetime | None = None,
        reason: str | None = None
    ) -> CancellationOutcome:
        """Cancel, or ask the instructor to cancel, a reservation.

        Outside the fee window the reservation is cancelled at once and the
        slot reopened. Inside it, a cancellation request is stored and the
        status is left unchanged until ``approve_cancellation``.

        Raises:
            NotCancellableError: If the reservation is terminal or already
                has a pending request
        """
        now = now or self.clock()
        with handle_errors(StorageError, "reservations", "request_cancellation"):
            with self.store.transaction():
                current = self.reservations.require(reservation_id)
                self._check_cancellable(current)
                decision = self.policy.evaluate(current.receipt.start_at, now, current.receipt.price)

                if decision.requires_approval:
                    updated = replace(
                        current,
                        cancellation_request=CancellationRequest(
                            requested_at=now,
                            tier=decision.tier,
                            fee_percent=decision.fee_percent,
                            fee_amount=decision.fee_amount,
                            reason=reason or None,
                        ),
                        updated_at=now,
                    )
                    self.reservations.upsert(updated)
                else:
                    updated = replace(
                        current.transition(ReservationStatus.CANCELLED, "cancel", now),
                        cancelled_at=now,
                        cancel_reason=reason or None,
                    )
                    self.reservations.upsert(updated)
                    self.schedule_service.refresh_availability(updated.schedule_id)

        outcome = CancellationOutcome(
            reservation_id=reservation_id,
            decision=decision,
            status=updated.status,
            cancelled=updated.status is ReservationStatus.CANCELLED,
        )
        self.info(
            "Cancellation processed",
            reservation_id=reservation_id,
            tier=decision.tier.value,
            days_until=decision.days_until,
            cancelled=outcome.cancelled,
        )

        if outcome.cancelled:
            self._notify("cancel", lambda: self.notifications.reservation_cancelled(updated, decision))
        else:
            self._notify("cancel_request", lambda: self.notifications.cancellation_requested(updated, decision))
        return outcome
