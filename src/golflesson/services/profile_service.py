"""Instructor profile content service."""

from collections.abc import Callable
from copy import deepcopy
from dataclasses import replace
from datetime import datetime

from golflesson.config.utils import is_valid_email
from golflesson.exceptions import StorageError, ValidationError, handle_errors
from golflesson.models.profile import DEFAULT_PROFILE, PROFILE_ID, Profile
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.utils.logging_utils import EnhancedLoggerMixin
from golflesson.utils.timezone_utils import utc_now


class ProfileService(EnhancedLoggerMixin):
    """Read and edit the instructor profile shown on the public page."""

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now):
        super().__init__()
        self.store = store
        self.profiles = repositories.profiles(store)
        self.clock = clock
        self.set_log_context(service="profile")

    def get_profile(self) -> Profile:
        """Stored profile, or the built-in default when none was saved."""
        profile = self.profiles.get(PROFILE_ID)
        if profile is None:
            self.debug("No stored profile, using default")
            return deepcopy(DEFAULT_PROFILE)
        return profile

    @staticmethod
    def validate(profile: Profile) -> None:
        """Check profile fields.

        Raises:
            ValidationError: If the name is missing or an address is malformed
        """
        problems = {}
        if not profile.name or not profile.name.strip():
            problems['name'] = "required"
        if profile.email and not is_valid_email(profile.email):
            problems['email'] = "invalid address"
        for index, location in enumerate(profile.locations):
            if not location.name.strip():
                problems[f'locations[{index}].name'] = "required"
        if problems:
            raise ValidationError("Invalid profile", problems)

    def save_profile(self, profile: Profile) -> Profile:
        """Replace the stored profile."""
        self.validate(profile)
        now = self.clock()
        with handle_errors(StorageError, "profile", "save_profile"):
            with self.store.transaction():
                existing = self.profiles.get(PROFILE_ID)
                saved = replace(
                    profile,
                    id=PROFILE_ID,
                    created_at=existing.created_at if existing else now,
                    updated_at=now,
                )
                self.profiles.upsert(saved)
        self.info("Saved instructor profile", created=existing is None)
        return saved
