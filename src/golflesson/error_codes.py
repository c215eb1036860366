"""Error codes for the golf lesson application."""

from enum import Enum

class ErrorCode(Enum):
    """Enumeration of all possible error codes."""
    # Authentication Errors
    AUTH_FAILED = "auth_failed"
    PERMISSION_DENIED = "permission_denied"

    # Booking Errors
    AGREEMENT_REQUIRED = "agreement_required"
    SLOT_UNAVAILABLE = "slot_unavailable"
    SLOT_IN_USE = "slot_in_use"
    NOT_CANCELLABLE = "not_cancellable"
    INVALID_STATE_TRANSITION = "invalid_state_transition"

    # Data Errors
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"

    # Storage Errors
    STORAGE_FAILURE = "storage_failure"

    # Notification Errors
    NOTIFICATION_FAILURE = "notification_failure"

    # Configuration Errors
    CONFIG_INVALID = "config_invalid"
    CONFIG_MISSING = "config_missing"
