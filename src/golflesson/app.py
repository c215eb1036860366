"""Application initialization."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from golflesson.config.settings import build_app_config
from golflesson.config.env import EnvConfig
from golflesson.config.types import AppConfig
from golflesson.services.account_service import AccountService
from golflesson.services.calendar_service import CalendarService
from golflesson.services.cancellation_policy import CancellationPolicy
from golflesson.services.email_templates import EmailTemplates
from golflesson.services.karte_service import KarteService
from golflesson.services.mail_service import MailService
from golflesson.services.notification_service import Mailer, NotificationService
from golflesson.services.plan_service import PlanService
from golflesson.services.profile_service import ProfileService
from golflesson.services.reservation_service import ReservationService
from golflesson.services.schedule_service import ScheduleService
from golflesson.storage.document_store import DocumentStore, JsonFileStore
from golflesson.utils.timezone_utils import utc_now


@dataclass
class LessonApp:
    """Wired services sharing one store."""
    config: AppConfig
    store: DocumentStore
    accounts: AccountService
    plans: PlanService
    profile: ProfileService
    schedules: ScheduleService
    reservations: ReservationService
    karte: KarteService
    calendar: CalendarService
    notifications: NotificationService
    policy: CancellationPolicy

def create_app(
    config: AppConfig | None = None,
    store: DocumentStore | None = None,
    mailer: Mailer | None = None,
    clock: Callable[[], datetime] = utc_now
) -> LessonApp:
    """Create the services for a configuration.

    Args:
        config: Application configuration; built from the environment when omitted
        store: Backing store; a JsonFileStore on ``config.data_dir`` by default
        mailer: Mail transport; Resend through MailService by default
        clock: Source of the current time
    """
    if config is None:
        config = build_app_config(dict(EnvConfig.get_global_config()))
    if store is None:
        store = JsonFileStore(config.data_dir)
    if mailer is None:
        mailer = MailService(config.mail)

    policy = CancellationPolicy.from_config(config.timezone, config.policy)
    accounts = AccountService(store, config.mail.admin_email, clock)
    notifications = NotificationService(
        mailer,
        EmailTemplates(config.app_url, config.timezone),
        accounts.list_admin_emails,
    )
    schedules = ScheduleService(store, config.timezone, clock)

    return LessonApp(
        config=config,
        store=store,
        accounts=accounts,
        plans=PlanService(store, clock),
        profile=ProfileService(store, clock),
        schedules=schedules,
        reservations=ReservationService(store, schedules, notifications, policy, clock),
        karte=KarteService(store, clock),
        calendar=CalendarService(store, config.timezone, config.app_url, clock),
        notifications=notifications,
        policy=policy,
    )
