"""
Reservation model for golf lesson application.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from golflesson.exceptions import InvalidStateTransitionError
from golflesson.models.lesson_plan import LessonCategory
from golflesson.models.schedule import Schedule
from golflesson.utils.timezone_utils import parse_iso, to_iso


class ReservationStatus(str, Enum):
    """Reservation lifecycle status."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.CANCELLED, ReservationStatus.COMPLETED)

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

STATUS_LABELS = {
    ReservationStatus.PENDING: "承認待ち",
    ReservationStatus.CONFIRMED: "確定",
    ReservationStatus.COMPLETED: "完了",
    ReservationStatus.CANCELLED: "キャンセル",
}

# Allowed status changes keyed by current status
TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELLED, ReservationStatus.COMPLETED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

class FeeTier(str, Enum):
    """Cancellation fee tier."""
    FREE = "FREE"
    HALF = "HALF"
    FULL = "FULL"

    @property
    def requires_approval(self) -> bool:
        return self is not FeeTier.FREE

@dataclass(frozen=True)
class BookingReceipt:
    """Schedule and plan details captured when the reservation was made.

    Later edits to the schedule or plan never change a stored receipt.
    """
    plan_name: str
    category: LessonCategory
    price: int
    duration: int
    start_at: datetime
    end_at: datetime
    location: str | None = None
    tee_off_time: str | None = None
    note: str | None = None

    @classmethod
    def of(cls, schedule: Schedule) -> "BookingReceipt":
        return cls(
            plan_name=schedule.lesson_plan.name,
            category=schedule.lesson_plan.category,
            price=schedule.lesson_plan.price,
            duration=schedule.lesson_plan.duration,
            start_at=schedule.start_at,
            end_at=schedule.end_at,
            location=schedule.location,
            tee_off_time=schedule.tee_off_time,
            note=schedule.note,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'planName': self.plan_name,
            'category': self.category.value,
            'price': self.price,
            'duration': self.duration,
            'startAt': to_iso(self.start_at),
            'endAt': to_iso(self.end_at),
            'location': self.location,
            'teeOffTime': self.tee_off_time,
            'note': self.note,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BookingReceipt":
        return cls(
            plan_name=data['planName'],
            category=LessonCategory(data['category']),
            price=int(data['price']),
            duration=int(data['duration']),
            start_at=parse_iso(data['startAt']),
            end_at=parse_iso(data['endAt']),
            location=data.get('location'),
            tee_off_time=data.get('teeOffTime'),
            note=data.get('note'),
        )

@dataclass(frozen=True)
class CancellationRequest:
    """Pending customer cancellation awaiting admin approval."""
    requested_at: datetime
    tier: FeeTier
    fee_percent: int
    fee_amount: int | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'requestedAt': to_iso(self.requested_at),
            'tier': self.tier.value,
            'feePercent': self.fee_percent,
            'feeAmount': self.fee_amount,
            'reason': self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CancellationRequest":
        return cls(
            requested_at=parse_iso(data['requestedAt']),
            tier=FeeTier(data['tier']),
            fee_percent=int(data['feePercent']),
            fee_amount=data.get('feeAmount'),
            reason=data.get('reason'),
        )

@dataclass
class Reservation:
    """A customer's claim on a schedule slot."""
    id: str
    user_id: str
    user_name: str
    user_email: str
    schedule_id: str
    receipt: BookingReceipt
    status: ReservationStatus = ReservationStatus.PENDING
    concern: str | None = None
    agreed_cancel_policy: bool = False
    agreed_photo_post: bool = False
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    cancellation_request: CancellationRequest | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Whether the reservation still holds its slot."""
        return not self.status.is_terminal

    @property
    def cancellation_requested(self) -> bool:
        return self.cancellation_request is not None

    def transition(self, new_status: ReservationStatus, action: str, now: datetime) -> "Reservation":
        """Return a copy moved to ``new_status``.

        Raises:
            InvalidStateTransitionError: If the move is not allowed from the
                current status
        """
        if new_status not in TRANSITIONS[self.status]:
            raise InvalidStateTransitionError(self.id, self.status.value, action)
        return replace(self, status=new_status, updated_at=now)

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'userName': self.user_name,
            'userEmail': self.user_email,
            'scheduleId': self.schedule_id,
            'schedule': self.receipt.to_dict(),
            'status': self.status.value,
            'concern': self.concern,
            'agreedCancelPolicy': self.agreed_cancel_policy,
            'agreedPhotoPost': self.agreed_photo_post,
            'cancelledAt': to_iso(self.cancelled_at),
            'cancelReason': self.cancel_reason,
            'cancellationRequest': (
                self.cancellation_request.to_dict() if self.cancellation_request else None
            ),
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reservation":
        request = data.get('cancellationRequest')
        return cls(
            id=data['id'],
            user_id=data['userId'],
            user_name=data.get('userName', ''),
            user_email=data.get('userEmail', ''),
            schedule_id=data['scheduleId'],
            receipt=BookingReceipt.from_dict(data['schedule']),
            status=ReservationStatus(data.get('status', ReservationStatus.PENDING.value)),
            concern=data.get('concern'),
            agreed_cancel_policy=bool(data.get('agreedCancelPolicy', False)),
            agreed_photo_post=bool(data.get('agreedPhotoPost', False)),
            cancelled_at=parse_iso(data.get('cancelledAt')),
            cancel_reason=data.get('cancelReason'),
            cancellation_request=CancellationRequest.from_dict(request) if request else None,
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )
