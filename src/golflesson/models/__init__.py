"""
Models package for golf lesson application.
"""

from golflesson.models.karte import Drill, DrillStatus, InstructorNote
from golflesson.models.lesson_plan import DEFAULT_PLANS, LessonCategory, LessonPlan
from golflesson.models.profile import DEFAULT_PROFILE, Location, Profile
from golflesson.models.reservation import (
    BookingReceipt,
    CancellationRequest,
    FeeTier,
    Reservation,
    ReservationStatus,
)
from golflesson.models.schedule import PlanSnapshot, Schedule
from golflesson.models.user import Account, Role

__all__ = [
    'Account',
    'BookingReceipt',
    'CancellationRequest',
    'DEFAULT_PLANS',
    'DEFAULT_PROFILE',
    'Drill',
    'DrillStatus',
    'FeeTier',
    'InstructorNote',
    'LessonCategory',
    'LessonPlan',
    'Location',
    'PlanSnapshot',
    'Profile',
    'Reservation',
    'ReservationStatus',
    'Role',
    'Schedule',
]
