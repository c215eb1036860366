"""Schedule slot management."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from golflesson.exceptions import SlotInUseError, StorageError, ValidationError, handle_errors
from golflesson.models.lesson_plan import LessonCategory
from golflesson.models.reservation import Reservation
from golflesson.models.schedule import Schedule
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.storage.repository import new_id
from golflesson.utils.logging_utils import EnhancedLoggerMixin
from golflesson.utils.timezone_utils import DEFAULT_TIMEZONE, TimezoneManager, utc_now


class ScheduleService(EnhancedLoggerMixin):
    """Admin operations on bookable slots.

    A slot is available when it is not blocked by the admin and no
    PENDING or CONFIRMED reservation references it.
    """

    def __init__(
        self,
        store: DocumentStore,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] = utc_now
    ):
        super().__init__()
        self.store = store
        self.schedules = repositories.schedules(store)
        self.reservations = repositories.reservations(store)
        self.plans = repositories.lesson_plans(store)
        self.tz = TimezoneManager(timezone)
        self.clock = clock
        self.set_log_context(service="schedules")

    def active_reservation(self, schedule_id: str) -> Reservation | None:
        """The PENDING or CONFIRMED reservation holding a slot, if any."""
        for reservation in self.reservations.list_by(schedule_id=schedule_id):
            if reservation.is_active:
                return reservation
        return None

    def refresh_availability(self, schedule_id: str) -> Schedule | None:
        """Recompute ``is_available`` of a slot inside the current transaction.

        Returns:
            The updated schedule, or None when the slot no longer exists
        """
        with self.store.transaction():
            schedule = self.schedules.get(schedule_id)
            if schedule is None:
                return None
            available = not schedule.is_blocked and self.active_reservation(schedule_id) is None
            if available != schedule.is_available:
                schedule = replace(schedule, is_available=available, updated_at=self.clock())
                self.schedules.upsert(schedule)
                self.debug("Slot availability changed", schedule_id=schedule_id, available=available)
            return schedule

    def create(
        self,
        lesson_plan_id: str,
        start_at: datetime,
        location: str | None = None,
        note: str | None = None,
        tee_off_time: str | None = None
    ) -> Schedule:
        """Create an open slot for a lesson plan.

        Args:
            lesson_plan_id: Plan the slot is offered for
            start_at: Start time; naive values are business-timezone wall time
            location: Optional place
            note: Optional free text
            tee_off_time: Tee-off label, round lessons only

        Returns:
            The created schedule with ``end_at`` derived from the plan duration
        """
        start_at = self.tz.localize_datetime(start_at)
        now = self.clock()
        with handle_errors(StorageError, "schedules", "create"):
            with self.store.transaction():
                plan = self.plans.require(lesson_plan_id)
                if tee_off_time and plan.category is not LessonCategory.ROUND:
                    raise ValidationError(
                        "Tee-off time is only allowed for round lessons",
                        {"lesson_plan_id": lesson_plan_id}
                    )
                schedule = Schedule.for_plan(
                    new_id("sch"),
                    plan,
                    start_at,
                    location=location or None,
                    note=note or None,
                    tee_off_time=tee_off_time or None,
                    is_available=True,
                    created_at=now,
                    updated_at=now,
                )
                self.schedules.upsert(schedule)
        self.info("Created schedule", schedule_id=schedule.id, plan_id=lesson_plan_id, start_at=start_at.isoformat())
        return schedule

    def delete(self, schedule_id: str) -> None:
        """Delete a slot that no active reservation references.

        Raises:
            NotFoundError: If the slot does not exist
            SlotInUseError: If a PENDING or CONFIRMED reservation holds the slot
        """
        with handle_errors(StorageError, "schedules", "delete"):
            with self.store.transaction():
                self.schedules.require(schedule_id)
                active = self.active_reservation(schedule_id)
                if active is not None:
                    raise SlotInUseError(schedule_id, active.id)
                self.schedules.delete(schedule_id)
        self.info("Deleted schedule", schedule_id=schedule_id)

    def set_availability(self, schedule_id: str, available: bool) -> Schedule:
        """Admin block or unblock of a slot.

        Unblocking a slot that still has an active reservation leaves it
        unavailable.
        """
        with handle_errors(StorageError, "schedules", "set_availability"):
            with self.store.transaction():
                schedule = self.schedules.require(schedule_id)
                self.schedules.upsert(replace(schedule, is_blocked=not available, updated_at=self.clock()))
                schedule = self.refresh_availability(schedule_id)
        self.info("Set slot availability", schedule_id=schedule_id, blocked=not available, available=schedule.is_available)
        return schedule

    def get(self, schedule_id: str) -> Schedule:
        return self.schedules.require(schedule_id)

    def list(
        self,
        available_only: bool = False,
        start: datetime | None = None,
        end: datetime | None = None
    ) -> list[Schedule]:
        """Slots ordered by start time, optionally filtered to [start, end)."""
        start = self.tz.localize_datetime(start) if start else None
        end = self.tz.localize_datetime(end) if end else None

        def matches(schedule: Schedule) -> bool:
            if available_only and not schedule.is_available:
                return False
            if start and schedule.start_at < start:
                return False
            if end and schedule.start_at >= end:
                return False
            return True

        return sorted(self.schedules.list_by(matches), key=lambda s: s.start_at)
