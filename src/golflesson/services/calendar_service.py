"""
iCalendar export of a customer's lessons.
"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from icalendar import Calendar
from icalendar import Event
from icalendar import vDatetime
from icalendar import vText

from golflesson.models.reservation import Reservation, ReservationStatus
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.utils.logging_utils import EnhancedLoggerMixin
from golflesson.utils.timezone_utils import DEFAULT_TIMEZONE, TimezoneManager, utc_now


class CalendarService(EnhancedLoggerMixin):
    """Builds calendars from booking receipts."""

    def __init__(
        self,
        store: DocumentStore,
        timezone: str = DEFAULT_TIMEZONE,
        app_url: str = "",
        clock: Callable[[], datetime] = utc_now
    ):
        super().__init__()
        self.accounts = repositories.accounts(store)
        self.reservations = repositories.reservations(store)
        self.tz = TimezoneManager(timezone)
        self.app_url = app_url.rstrip('/')
        self.clock = clock

    def build_base_calendar(self, name: str) -> Calendar:
        """Create base calendar with metadata."""
        calendar = Calendar()
        calendar.add('prodid', vText('-//Golf Lesson//JA'))
        calendar.add('version', vText('2.0'))
        calendar.add('calscale', vText('GREGORIAN'))
        calendar.add('method', vText('PUBLISH'))
        calendar.add('x-wr-calname', vText(f'ゴルフレッスン - {name}'))
        calendar.add('x-wr-timezone', vText(self.tz.timezone_name))
        return calendar

    def build_event(self, reservation: Reservation) -> Event:
        """Create an event from a reservation's booking receipt."""
        receipt = reservation.receipt
        event = Event()
        summary = receipt.plan_name
        if reservation.status is ReservationStatus.PENDING:
            summary = f"{summary}（承認待ち）"
        event.add('summary', summary)
        event.add('dtstart', vDatetime(self.tz.to_local(receipt.start_at)))
        event.add('dtend', vDatetime(self.tz.to_local(receipt.end_at)))
        event.add('dtstamp', vDatetime(self.clock()))
        event.add('uid', vText(f"{reservation.id}@golflesson"))
        if receipt.location:
            event.add('location', vText(receipt.location))

        lines = [f"料金: ¥{receipt.price:,}（税込）", f"時間: {receipt.duration}分"]
        if receipt.tee_off_time:
            lines.append(f"ティーオフ: {receipt.tee_off_time}")
        if receipt.note:
            lines.append(f"備考: {receipt.note}")
        if reservation.concern:
            lines.append(f"ご相談: {reservation.concern}")
        if self.app_url:
            lines.append(f"{self.app_url}/mypage/reservations")
        event.add('description', vText("\n".join(lines)))
        event.add('status', vText('CONFIRMED' if reservation.status is ReservationStatus.CONFIRMED else 'TENTATIVE'))
        return event

    def build_calendar(self, user_id: str) -> Calendar:
        """Calendar with one event per PENDING or CONFIRMED reservation of a user."""
        account = self.accounts.require(user_id)
        calendar = self.build_base_calendar(account.display_name or account.email)

        active = self.reservations.list_by(lambda r: r.is_active, user_id=user_id)
        for reservation in sorted(active, key=lambda r: r.receipt.start_at):
            calendar.add_component(self.build_event(reservation))

        self.debug("Built calendar", user_id=user_id, events=len(active))
        return calendar

    def write_calendar(self, calendar: Calendar, file_path: str | Path) -> Path:
        """Write calendar to file."""
        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'wb') as f:
                calendar_data = calendar.to_ical()
                f.write(calendar_data)
            self.info(f"Created calendar file: {file_path}", events=len(calendar.walk('vevent')))
        except OSError as e:
            self.error(f"Failed to write calendar file: {e}")
            raise
        return file_path
