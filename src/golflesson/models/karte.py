"""
Customer karte models: drills and instructor notes.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from golflesson.utils.timezone_utils import parse_iso, to_iso


class DrillStatus(str, Enum):
    """Progress of an assigned drill."""
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def label(self) -> str:
        return {
            DrillStatus.ASSIGNED: "未着手",
            DrillStatus.IN_PROGRESS: "取り組み中",
            DrillStatus.COMPLETED: "完了",
        }[self]

@dataclass
class Drill:
    """Practice drill assigned to a customer."""
    id: str
    user_id: str
    title: str
    description: str | None = None
    video_url: str | None = None
    status: DrillStatus = DrillStatus.ASSIGNED
    due_date: date | None = None
    lesson_record_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'lessonRecordId': self.lesson_record_id,
            'title': self.title,
            'description': self.description,
            'videoUrl': self.video_url,
            'status': self.status.value,
            'dueDate': self.due_date.isoformat() if self.due_date else None,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Drill":
        due = data.get('dueDate')
        return cls(
            id=data['id'],
            user_id=data['userId'],
            title=data['title'],
            description=data.get('description'),
            video_url=data.get('videoUrl'),
            status=DrillStatus(data.get('status', DrillStatus.ASSIGNED.value)),
            due_date=date.fromisoformat(due[:10]) if due else None,
            lesson_record_id=data.get('lessonRecordId'),
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )

@dataclass
class InstructorNote:
    """Instructor's note about a customer."""
    id: str
    user_id: str
    content: str
    is_private: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'content': self.content,
            'isPrivate': self.is_private,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstructorNote":
        return cls(
            id=data['id'],
            user_id=data['userId'],
            content=data['content'],
            is_private=bool(data.get('isPrivate', True)),
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )
