"""Customer karte: drills, instructor notes and reservation history."""

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from golflesson.exceptions import NotFoundError, StorageError, ValidationError, handle_errors
from golflesson.models.karte import Drill, DrillStatus, InstructorNote
from golflesson.models.reservation import Reservation, ReservationStatus
from golflesson.models.user import Account
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.storage.repository import new_id
from golflesson.utils.logging_utils import EnhancedLoggerMixin
from golflesson.utils.timezone_utils import utc_now


@dataclass
class CustomerDetail:
    """Everything the instructor sees on a customer's karte."""
    account: Account
    reservations: list[Reservation] = field(default_factory=list)
    drills: list[Drill] = field(default_factory=list)
    notes: list[InstructorNote] = field(default_factory=list)

    @property
    def status_counts(self) -> dict[ReservationStatus, int]:
        counts = Counter(r.status for r in self.reservations)
        return {status: counts.get(status, 0) for status in ReservationStatus}

class KarteService(EnhancedLoggerMixin):
    """Admin records kept per customer."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now):
        super().__init__()
        self.store = store
        self.accounts = repositories.accounts(store)
        self.reservations = repositories.reservations(store)
        self.drills = repositories.drills(store)
        self.notes = repositories.instructor_notes(store)
        self.clock = clock
        self.set_log_context(service="karte")

    def _require_customer(self, user_id: str) -> Account:
        """Admins are not karte subjects."""
        account = self.accounts.get(user_id) if user_id else None
        if account is None or account.is_admin:
            raise NotFoundError(f"Customer {user_id} not found", "customer", user_id)
        return account

    # Drills

    def add_drill(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        video_url: str | None = None,
        due_date: date | None = None,
        lesson_record_id: str | None = None
    ) -> Drill:
        if not title or not title.strip():
            raise ValidationError("Drill title is required", {"field": "title"})

        now = self.clock()
        with handle_errors(StorageError, "karte", "add_drill"):
            with self.store.transaction():
                self._require_customer(user_id)
                drill = Drill(
                    id=new_id("drill"),
                    user_id=user_id,
                    title=title.strip(),
                    description=description or None,
                    video_url=video_url or None,
                    due_date=due_date,
                    lesson_record_id=lesson_record_id,
                    created_at=now,
                    updated_at=now,
                )
                self.drills.upsert(drill)
        self.info("Assigned drill", drill_id=drill.id, user_id=user_id)
        return drill

    def update_drill_status(self, drill_id: str, status: DrillStatus) -> Drill:
        with handle_errors(StorageError, "karte", "update_drill_status"):
            with self.store.transaction():
                drill = replace(self.drills.require(drill_id), status=status, updated_at=self.clock())
                self.drills.upsert(drill)
        self.info("Updated drill status", drill_id=drill_id, status=status.value)
        return drill

    def delete_drill(self, drill_id: str) -> None:
        with handle_errors(StorageError, "karte", "delete_drill"):
            with self.store.transaction():
                self.drills.require(drill_id)
                self.drills.delete(drill_id)
        self.info("Deleted drill", drill_id=drill_id)

    def list_drills(self, user_id: str) -> list[Drill]:
        drills = self.drills.list_by(user_id=user_id)
        return sorted(drills, key=lambda d: (d.created_at.timestamp() if d.created_at else 0.0, d.id))

    # Instructor notes

    def add_note(self, user_id: str, content: str, is_private: bool = True) -> InstructorNote:
        if not content or not content.strip():
            raise ValidationError("Note content is required", {"field": "content"})

        now = self.clock()
        with handle_errors(StorageError, "karte", "add_note"):
            with self.store.transaction():
                self._require_customer(user_id)
                note = InstructorNote(
                    id=new_id("note"),
                    user_id=user_id,
                    content=content.strip(),
                    is_private=is_private,
                    created_at=now,
                    updated_at=now,
                )
                self.notes.upsert(note)
        self.info("Added instructor note", note_id=note.id, user_id=user_id)
        return note

    def list_notes(self, user_id: str, include_private: bool = True) -> list[InstructorNote]:
        """Notes newest first; customers only get the shared ones."""
        notes = self.notes.list_by(
            None if include_private else (lambda n: not n.is_private),
            user_id=user_id,
        )
        return sorted(notes, key=lambda n: (n.created_at.timestamp() if n.created_at else 0.0, n.id), reverse=True)

    def delete_note(self, note_id: str) -> None:
        with handle_errors(StorageError, "karte", "delete_note"):
            with self.store.transaction():
                self.notes.require(note_id)
                self.notes.delete(note_id)
        self.info("Deleted instructor note", note_id=note_id)

    # Aggregates

    def reservation_counts(self) -> dict[str, int]:
        """Number of reservations per user id, all statuses included."""
        return dict(Counter(r.user_id for r in self.reservations.iter_all()))

    def get_customer_detail(self, user_id: str) -> CustomerDetail:
        """Account, reservation history, drills and notes of a customer.

        Raises:
            NotFoundError: If the account does not exist or is an admin
        """
        with self.store.transaction():
            account = self._require_customer(user_id)
            reservations = sorted(
                self.reservations.list_by(user_id=user_id),
                key=lambda r: r.receipt.start_at,
                reverse=True,
            )
            return CustomerDetail(
                account=account,
                reservations=reservations,
                drills=self.list_drills(user_id),
                notes=self.list_notes(user_id),
            )
