"""
Golf lesson reservation back office.
"""

__version__ = '0.1.0'

from .exceptions import (
    AgreementRequiredError,
    AuthError,
    ConfigError,
    InvalidStateTransitionError,
    LessonError,
    NotCancellableError,
    NotFoundError,
    NotificationError,
    PermissionDeniedError,
    SlotInUseError,
    SlotUnavailableError,
    StorageError,
    ValidationError,
)

__all__ = [
    'AgreementRequiredError',
    'AuthError',
    'ConfigError',
    'InvalidStateTransitionError',
    'LessonError',
    'NotCancellableError',
    'NotFoundError',
    'NotificationError',
    'PermissionDeniedError',
    'SlotInUseError',
    'SlotUnavailableError',
    'StorageError',
    'ValidationError',
]
