"""Pytest configuration and shared fixtures."""

import threading
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from golflesson.app import create_app
from golflesson.config.env import EnvConfig
from golflesson.config.settings import ConfigurationManager
from golflesson.config.types import AppConfig, MailConfig
from golflesson.models.user import Role
from golflesson.services.mail_service import SendResult
from golflesson.storage.document_store import MemoryStore

JST = ZoneInfo("Asia/Tokyo")
UTC = ZoneInfo("UTC")

# Saturday 2025-03-01 10:00 in Tokyo
FIXED_NOW = datetime(2025, 3, 1, 10, 0, tzinfo=JST)

def jst(*args: int) -> datetime:
    """Tokyo wall-clock time."""
    return datetime(*args, tzinfo=JST)

class Clock:
    """Settable clock passed to the services."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)

class FakeMailer:
    """Mailer recording every message; selected addresses fail."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail_for: set[str] = set()
        self.raise_error = False
        self._lock = threading.Lock()

    def send(self, to: str, subject: str, html: str) -> SendResult:
        if self.raise_error:
            raise ConnectionError("mail API unreachable")
        if to in self.fail_for:
            return SendResult(success=False, error="rejected")
        with self._lock:
            self.sent.append((to, subject, html))
            return SendResult(success=True, id=f"msg-{len(self.sent)}")

    def subjects_for(self, to: str) -> list[str]:
        return [subject for recipient, subject, _ in self.sent if recipient == to]

@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and cached configuration."""
    for env_var in EnvConfig.ENV_MAPPING:
        monkeypatch.delenv(env_var, raising=False)
    for env_var in ('GOLFLESSON_FREE_CANCEL_DAYS', 'GOLFLESSON_HALF_FEE_DAYS', 'GOLFLESSON_FROM_NAME'):
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv("GOLFLESSON_CONFIG_DIR", str(tmp_path / "config"))

    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()

@pytest.fixture
def clock():
    return Clock(FIXED_NOW)

@pytest.fixture
def store():
    return MemoryStore()

@pytest.fixture
def mailer():
    return FakeMailer()

@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        global_config={},
        data_dir=str(tmp_path / "data"),
        ics_dir=str(tmp_path / "ics"),
        app_url="https://lesson.example.com",
        mail=MailConfig(admin_email="owner@example.com"),
    )

@pytest.fixture
def app(app_config, store, mailer, clock):
    return create_app(app_config, store=store, mailer=mailer, clock=clock)

@pytest.fixture
def customer(app):
    return app.accounts.register("user-1", "taro@example.com", "山田太郎", phone="090-1234-5678")

@pytest.fixture
def admin(app):
    return app.accounts.register("admin-1", "mayumi@example.com", "奥村真由美", role=Role.ADMIN)

@pytest.fixture
def plans(app):
    app.plans.seed_defaults()
    return {plan.id: plan for plan in app.plans.list_plans()}

@pytest.fixture
def make_schedule(app, plans):
    """Create a slot ``days_ahead`` calendar days after FIXED_NOW."""
    def _make(days_ahead: int = 10, hour: int = 10, plan_id: str = "plan-indoor", **kwargs):
        start = (FIXED_NOW + timedelta(days=days_ahead)).replace(hour=hour, minute=0)
        return app.schedules.create(plan_id, start, **kwargs)
    return _make

@pytest.fixture
def book(app, customer):
    """Book a slot for the default customer unless another user id is given."""
    def _book(schedule_id: str, user_id: str | None = None, **kwargs):
        kwargs.setdefault('agreed_cancel_policy', True)
        return app.reservations.create_reservation(user_id or customer.id, schedule_id, **kwargs)
    return _book
