"""
Schedule model for golf lesson application.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from golflesson.models.lesson_plan import LessonCategory, LessonPlan
from golflesson.utils.timezone_utils import parse_iso, to_iso


@dataclass(frozen=True)
class PlanSnapshot:
    """Lesson plan fields embedded in a schedule slot."""
    name: str
    category: LessonCategory
    price: int
    duration: int
    max_attendees: int

    @classmethod
    def of(cls, plan: LessonPlan) -> "PlanSnapshot":
        return cls(
            name=plan.name,
            category=plan.category,
            price=plan.price,
            duration=plan.duration,
            max_attendees=plan.max_attendees,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'category': self.category.value,
            'price': self.price,
            'duration': self.duration,
            'maxAttendees': self.max_attendees,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlanSnapshot":
        return cls(
            name=data['name'],
            category=LessonCategory(data['category']),
            price=int(data['price']),
            duration=int(data['duration']),
            max_attendees=int(data.get('maxAttendees', 1)),
        )

@dataclass
class Schedule:
    """A bookable lesson time slot.

    ``is_available`` is kept equal to ``not is_blocked`` and no
    non-terminal reservation on the slot; the schedule and reservation
    services recompute it whenever either side changes.
    """
    id: str
    lesson_plan_id: str
    lesson_plan: PlanSnapshot
    start_at: datetime
    end_at: datetime
    max_attendees: int = 1
    location: str | None = None
    note: str | None = None
    tee_off_time: str | None = None
    is_available: bool = True
    is_blocked: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def for_plan(
        cls,
        schedule_id: str,
        plan: LessonPlan,
        start_at: datetime,
        **kwargs: Any
    ) -> "Schedule":
        """Create a slot whose end is derived from the plan duration."""
        return cls(
            id=schedule_id,
            lesson_plan_id=plan.id,
            lesson_plan=PlanSnapshot.of(plan),
            start_at=start_at,
            end_at=start_at + timedelta(minutes=plan.duration),
            max_attendees=plan.max_attendees,
            **kwargs
        )

    @property
    def price(self) -> int:
        return self.lesson_plan.price

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'lessonPlanId': self.lesson_plan_id,
            'lessonPlan': self.lesson_plan.to_dict(),
            'startAt': to_iso(self.start_at),
            'endAt': to_iso(self.end_at),
            'location': self.location,
            'maxAttendees': self.max_attendees,
            'isAvailable': self.is_available,
            'isBlocked': self.is_blocked,
            'note': self.note,
            'teeOffTime': self.tee_off_time,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Schedule":
        return cls(
            id=data['id'],
            lesson_plan_id=data['lessonPlanId'],
            lesson_plan=PlanSnapshot.from_dict(data['lessonPlan']),
            start_at=parse_iso(data['startAt']),
            end_at=parse_iso(data['endAt']),
            max_attendees=int(data.get('maxAttendees', 1)),
            location=data.get('location'),
            note=data.get('note'),
            tee_off_time=data.get('teeOffTime'),
            is_available=bool(data.get('isAvailable', True)),
            is_blocked=bool(data.get('isBlocked', False)),
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )
