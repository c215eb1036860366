"""
Instructor profile model for golf lesson application.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from golflesson.utils.timezone_utils import parse_iso, to_iso


PROFILE_ID = "profile"

@dataclass
class Location:
    """Venue where lessons are given."""
    name: str
    area: str

    def to_dict(self) -> dict[str, str]:
        return {'name': self.name, 'area': self.area}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        return cls(name=data['name'], area=data.get('area', ''))

@dataclass
class Profile:
    """Public page content for the instructor. A single record."""
    name: str
    name_en: str = ""
    title: str = ""
    image: str = ""
    instagram: str = ""
    email: str = ""
    bio: str = ""
    qualifications: list[str] = field(default_factory=list)
    teaching_philosophy: list[str] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)
    id: str = PROFILE_ID
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'nameEn': self.name_en,
            'title': self.title,
            'image': self.image,
            'instagram': self.instagram,
            'email': self.email,
            'bio': self.bio,
            'qualifications': list(self.qualifications),
            'teachingPhilosophy': list(self.teaching_philosophy),
            'locations': [location.to_dict() for location in self.locations],
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        return cls(
            id=data.get('id', PROFILE_ID),
            name=data['name'],
            name_en=data.get('nameEn', ''),
            title=data.get('title', ''),
            image=data.get('image', ''),
            instagram=data.get('instagram', ''),
            email=data.get('email', ''),
            bio=data.get('bio', ''),
            qualifications=list(data.get('qualifications') or []),
            teaching_philosophy=list(data.get('teachingPhilosophy') or []),
            locations=[Location.from_dict(item) for item in data.get('locations') or []],
            created_at=parse_iso(data.get('createdAt')),
            updated_at=parse_iso(data.get('updatedAt')),
        )

DEFAULT_PROFILE = Profile(
    name="奥村真由美",
    name_en="Mayumi Okumura",
    title="LPGA ティーチングプロフェッショナル会員",
    image="/mayumi.jpg",
    instagram="@mayumi_gf",
    email="mayumi_okumura@outlook.com",
    bio=(
        "ゴルフの楽しさをすべての方にお届けします。"
        "初心者の方から経験者の方まで、一人ひとりに合った指導でスコアアップのお手伝いをいたします。"
    ),
    qualifications=[
        "LPGA ティーチングプロフェッショナル会員",
        "TrackMan 認定インストラクター",
        "SPORTS BOX AI 認定コーチ",
    ],
    teaching_philosophy=[
        "一人ひとりに合わせたカスタマイズ指導",
        "最新テクノロジー（TrackMan・SPORTS BOX AI）活用",
        "楽しく続けられるレッスン環境づくり",
        "初心者からシングルまで幅広く対応",
    ],
    locations=[
        Location(name="golf next24 中川店", area="横浜"),
        Location(name="the golf house 京橋八丁堀", area="東京"),
        Location(name="PGL パーソナルゴルフラウンジ", area="東京"),
    ],
)
