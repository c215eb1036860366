"""
Lesson plan model for golf lesson application.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from golflesson.utils.timezone_utils import parse_iso, to_iso


class LessonCategory(str, Enum):
    """Lesson plan category."""
    REGULAR = "REGULAR"
    ROUND = "ROUND"

    @property
    def label(self) -> str:
        return "ラウンドレッスン" if self is LessonCategory.ROUND else "レギュラーレッスン"

@dataclass
class LessonPlan:
    """Catalog entry for a bookable lesson."""
    id: str
    name: str
    category: LessonCategory
    price: int
    duration: int
    max_attendees: int = 1
    description: str | None = None
    is_published: bool = True
    display_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.value,
            'description': self.description,
            'price': self.price,
            'duration': self.duration,
            'maxAttendees': self.max_attendees,
            'isPublished': self.is_published,
            'displayOrder': self.display_order,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LessonPlan":
        return cls(
            id=data['id'],
            name=data['name'],
            category=LessonCategory(data.get('category', LessonCategory.REGULAR.value)),
            price=int(data['price']),
            duration=int(data['duration']),
            max_attendees=int(data.get('maxAttendees', 1)),
            description=data.get('description'),
            is_published=bool(data.get('isPublished', True)),
            display_order=int(data.get('displayOrder', 0)),
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )

ROUND_DESCRIPTION = "コースを回りながら実戦的なマネジメントを指導"

DEFAULT_PLANS: list[LessonPlan] = [
    LessonPlan(
        id="plan-indoor",
        name="インドアゴルフレッスン（50分）",
        category=LessonCategory.REGULAR,
        description="打席でのスイング基礎・課題改善レッスン",
        price=13000,
        duration=50,
        max_attendees=1,
        display_order=1,
    ),
    LessonPlan(
        id="plan-round-28000",
        name="ラウンドレッスン",
        category=LessonCategory.ROUND,
        description=ROUND_DESCRIPTION,
        price=28000,
        duration=300,
        max_attendees=4,
        display_order=2,
    ),
    LessonPlan(
        id="plan-round-30000",
        name="ラウンドレッスン",
        category=LessonCategory.ROUND,
        description=ROUND_DESCRIPTION,
        price=30000,
        duration=300,
        max_attendees=4,
        display_order=3,
    ),
    LessonPlan(
        id="plan-round-32000",
        name="ラウンドレッスン",
        category=LessonCategory.ROUND,
        description=ROUND_DESCRIPTION,
        price=32000,
        duration=300,
        max_attendees=4,
        display_order=4,
    ),
]
