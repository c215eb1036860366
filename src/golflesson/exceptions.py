"""Centralized error definitions for golf lesson application."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar

from golflesson.config.error_aggregator import aggregate_error
from golflesson.error_codes import ErrorCode


logger = logging.getLogger(__name__)

@dataclass
class LessonError(Exception):
    """Base exception for all golf lesson errors."""
    message: str
    code: ErrorCode
    details: dict[str, Any] | None = None

    # Plain-language message shown to customers and the instructor
    USER_MESSAGE: ClassVar[str] = "エラーが発生しました。時間をおいて再度お試しください。"

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Code: {self.code.value}, Details: {self.details})"
        return f"{self.message} (Code: {self.code.value})"

    @property
    def user_message(self) -> str:
        """Message safe to display; never contains storage internals."""
        return self.USER_MESSAGE

class AuthError(LessonError):
    """Authentication error."""
    USER_MESSAGE = "ログインが必要です"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.AUTH_FAILED, details)

class PermissionDeniedError(LessonError):
    """Caller lacks the required role."""
    USER_MESSAGE = "この操作を行う権限がありません"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.PERMISSION_DENIED, details)

class ConfigError(LessonError):
    """Configuration error."""
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.CONFIG_INVALID, details)

class ValidationError(LessonError):
    """Validation error."""
    USER_MESSAGE = "入力内容に誤りがあります"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.VALIDATION_FAILED, details)

class AgreementRequiredError(ValidationError):
    """Cancellation policy was not agreed to."""
    USER_MESSAGE = "キャンセルポリシーへの同意は必須です"

    def __init__(self, message: str = "Cancellation policy agreement is required", details: dict[str, Any] | None = None):
        LessonError.__init__(self, message, ErrorCode.AGREEMENT_REQUIRED, details)

class NotFoundError(LessonError):
    """Reservation, schedule, plan or account id is unknown."""
    USER_MESSAGE = "指定されたデータが見つかりません"

    def __init__(self, message: str, entity: str, entity_id: str):
        super().__init__(message, ErrorCode.NOT_FOUND, {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id

class SlotUnavailableError(LessonError):
    """Schedule slot is not open for booking."""
    USER_MESSAGE = "この枠は既に予約されています"

    def __init__(self, schedule_id: str):
        super().__init__(
            f"Schedule {schedule_id} is not available",
            ErrorCode.SLOT_UNAVAILABLE,
            {"schedule_id": schedule_id}
        )

class SlotInUseError(LessonError):
    """Schedule slot still has an active reservation."""
    USER_MESSAGE = "予約が入っている枠は削除できません"

    def __init__(self, schedule_id: str, reservation_id: str | None = None):
        super().__init__(
            f"Schedule {schedule_id} has an active reservation",
            ErrorCode.SLOT_IN_USE,
            {"schedule_id": schedule_id, "reservation_id": reservation_id}
        )

class NotCancellableError(LessonError):
    """Reservation cannot be cancelled in its current state."""
    USER_MESSAGE = "この予約はキャンセルできません"

    def __init__(self, reservation_id: str, status: str):
        super().__init__(
            f"Reservation {reservation_id} cannot be cancelled from status {status}",
            ErrorCode.NOT_CANCELLABLE,
            {"reservation_id": reservation_id, "status": status}
        )

class InvalidStateTransitionError(LessonError):
    """Requested status change is not allowed."""
    USER_MESSAGE = "この予約は既に処理済みです"

    def __init__(self, reservation_id: str, current: str, action: str):
        super().__init__(
            f"Cannot {action} reservation {reservation_id} in status {current}",
            ErrorCode.INVALID_STATE_TRANSITION,
            {"reservation_id": reservation_id, "status": current, "action": action}
        )

class StorageError(LessonError):
    """Backing store read or write failed."""
    USER_MESSAGE = "データの保存に失敗しました。時間をおいて再度お試しください。"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.STORAGE_FAILURE, details)

class NotificationError(LessonError):
    """Notification could not be delivered. Logged, never surfaced."""
    USER_MESSAGE = "メール送信に失敗しました"

    def __init__(self, message: str, recipient: str | None = None):
        super().__init__(message, ErrorCode.NOTIFICATION_FAILURE, {"recipient": recipient})

@contextmanager
def handle_errors(
    error_type: type[LessonError],
    service: str,
    operation: str
) -> Iterator[None]:
    """Log errors raised inside the block and re-raise them.

    Errors of ``error_type`` are reported to the error aggregator as is.
    Unexpected exceptions are logged with traceback and wrapped in
    ``error_type`` when it is StorageError, so storage internals never
    leak to callers.

    Args:
        error_type: The expected error type
        service: The service name
        operation: The operation name
    """
    try:
        yield
    except error_type as e:
        aggregate_error(str(e), service, e.__traceback__)
        raise
    except LessonError:
        raise
    except Exception as e:
        logger.error(
            f"Unexpected error in {service}.{operation}: {e}",
            exc_info=True
        )
        aggregate_error(str(e), service, e.__traceback__)
        if error_type is StorageError:
            raise StorageError(
                f"Storage operation {operation} failed",
                {"service": service, "error_type": type(e).__name__}
            ) from e
        raise
