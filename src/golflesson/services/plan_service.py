"""Lesson plan catalog service."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from golflesson.exceptions import StorageError, ValidationError, handle_errors
from golflesson.models.lesson_plan import DEFAULT_PLANS, LessonPlan
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.utils.logging_utils import EnhancedLoggerMixin
from golflesson.utils.timezone_utils import utc_now


class PlanService(EnhancedLoggerMixin):
    """Admin management of lesson plans."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now):
        super().__init__()
        self.store = store
        self.plans = repositories.lesson_plans(store)
        self.clock = clock
        self.set_log_context(service="plans")

    def list_plans(self, published_only: bool = False) -> list[LessonPlan]:
        """Plans in display order."""
        plans = self.plans.list_by(
            (lambda p: p.is_published) if published_only else None
        )
        return sorted(plans, key=lambda p: (p.display_order, p.id))

    def get_plan(self, plan_id: str) -> LessonPlan:
        return self.plans.require(plan_id)

    @staticmethod
    def validate(plan: LessonPlan) -> None:
        """Check catalog constraints.

        Raises:
            ValidationError: If a field is out of range
        """
        problems = {}
        if not plan.id:
            problems['id'] = "required"
        if not plan.name or not plan.name.strip():
            problems['name'] = "required"
        if plan.price < 0:
            problems['price'] = "must not be negative"
        if plan.duration <= 0:
            problems['duration'] = "must be positive"
        if plan.max_attendees < 1:
            problems['maxAttendees'] = "must be at least 1"
        if problems:
            raise ValidationError(f"Invalid lesson plan {plan.id}", problems)

    def save_plan(self, plan: LessonPlan) -> LessonPlan:
        """Insert or update a plan.

        Existing schedules keep the plan details they were created with.
        """
        self.validate(plan)
        now = self.clock()
        with handle_errors(StorageError, "plans", "save_plan"):
            with self.store.transaction():
                existing = self.plans.get(plan.id)
                saved = replace(
                    plan,
                    created_at=existing.created_at if existing else (plan.created_at or now),
                    updated_at=now,
                )
                self.plans.upsert(saved)
        self.info("Saved lesson plan", plan_id=plan.id, created=existing is None)
        return saved

    def delete_plan(self, plan_id: str) -> None:
        with handle_errors(StorageError, "plans", "delete_plan"):
            with self.store.transaction():
                self.plans.require(plan_id)
                self.plans.delete(plan_id)
        self.info("Deleted lesson plan", plan_id=plan_id)

    def seed_defaults(self) -> int:
        """Write the default catalog when no plan exists.

        Returns:
            Number of plans written
        """
        now = self.clock()
        with handle_errors(StorageError, "plans", "seed_defaults"):
            with self.store.transaction():
                if self.plans.list_by():
                    self.debug("Catalog not empty, skipping default plans")
                    return 0
                for plan in DEFAULT_PLANS:
                    self.plans.upsert(replace(plan, created_at=now, updated_at=now))
        self.info("Seeded default lesson plans", count=len(DEFAULT_PLANS))
        return len(DEFAULT_PLANS)
