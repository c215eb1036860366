"""
Account model for golf lesson application.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from golflesson.utils.timezone_utils import parse_iso, to_iso


class Role(str, Enum):
    """Account role."""
    USER = "USER"
    ADMIN = "ADMIN"

@dataclass
class Account:
    """Customer or instructor account."""
    id: str
    email: str
    display_name: str
    role: Role = Role.USER
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'displayName': self.display_name,
            'role': self.role.value,
            'phone': self.phone,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            display_name=data.get('displayName', ''),
            role=Role(data.get('role', Role.USER.value)),
            phone=data.get('phone'),
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )
