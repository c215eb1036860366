"""Repositories for each stored collection."""

from golflesson.models.karte import Drill, InstructorNote
from golflesson.models.lesson_plan import LessonPlan
from golflesson.models.profile import Profile
from golflesson.models.reservation import Reservation
from golflesson.models.schedule import Schedule
from golflesson.models.user import Account
from golflesson.storage.document_store import DocumentStore
from golflesson.storage.repository import Repository


RESERVATIONS = "reservations"
SCHEDULES = "schedules"
LESSON_PLANS = "lesson_plans"
ACCOUNTS = "accounts"
DRILLS = "drills"
INSTRUCTOR_NOTES = "instructor_notes"
PROFILE = "profile"

ALL_COLLECTIONS = (RESERVATIONS, SCHEDULES, LESSON_PLANS, ACCOUNTS, DRILLS, INSTRUCTOR_NOTES, PROFILE)

def reservations(store: DocumentStore) -> Repository[Reservation]:
    return Repository(store, RESERVATIONS, Reservation.from_dict, "reservation")

def schedules(store: DocumentStore) -> Repository[Schedule]:
    return Repository(store, SCHEDULES, Schedule.from_dict, "schedule")

def lesson_plans(store: DocumentStore) -> Repository[LessonPlan]:
    return Repository(store, LESSON_PLANS, LessonPlan.from_dict, "lesson plan")

def accounts(store: DocumentStore) -> Repository[Account]:
    return Repository(store, ACCOUNTS, Account.from_dict, "account")

def drills(store: DocumentStore) -> Repository[Drill]:
    return Repository(store, DRILLS, Drill.from_dict, "drill")

def instructor_notes(store: DocumentStore) -> Repository[InstructorNote]:
    return Repository(store, INSTRUCTOR_NOTES, InstructorNote.from_dict, "note")

def profiles(store: DocumentStore) -> Repository[Profile]:
    return Repository(store, PROFILE, Profile.from_dict, "profile")
