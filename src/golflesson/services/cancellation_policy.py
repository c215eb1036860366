"""Cancellation fee policy.

Fee tiers are decided by the number of calendar days between today and
the lesson date in the business timezone:

    days_until >= 7       FREE  0%    cancelled immediately
    3 <= days_until <= 6  HALF  50%   needs admin approval
    days_until <= 2       FULL  100%  needs admin approval
"""

from dataclasses import dataclass
from datetime import datetime

from golflesson.config.types import PolicyConfig
from golflesson.models.reservation import FeeTier
from golflesson.utils.timezone_utils import DEFAULT_TIMEZONE, TimezoneManager


FREE_CANCEL_DAYS = 7
HALF_FEE_DAYS = 3

FEE_PERCENT = {
    FeeTier.FREE: 0,
    FeeTier.HALF: 50,
    FeeTier.FULL: 100,
}

TIER_LABELS = {
    FeeTier.FREE: "無料キャンセル",
    FeeTier.HALF: "キャンセル料50%",
    FeeTier.FULL: "キャンセル料100%",
}

@dataclass(frozen=True)
class PolicyDecision:
    """Result of evaluating the policy for one lesson."""
    tier: FeeTier
    fee_percent: int
    days_until: int
    label: str
    message: str
    fee_amount: int | None = None

    @property
    def requires_approval(self) -> bool:
        return self.tier.requires_approval

def _message(tier: FeeTier, days_until: int, free_days: int = FREE_CANCEL_DAYS) -> str:
    if tier is FeeTier.FREE:
        return f"{free_days}日前以上のため、キャンセル料は発生しません。"
    if tier is FeeTier.HALF:
        return f"レッスンまで{days_until}日です。キャンセル料（レッスン料金の50%）が発生します。"
    when = "当日" if days_until <= 0 else f"{days_until}日"
    return f"レッスンまで{when}です。キャンセル料（レッスン料金の100%）が発生します。"

class CancellationPolicy:
    """Maps days until a lesson to a cancellation fee tier."""

    def __init__(
        self,
        timezone: str = DEFAULT_TIMEZONE,
        free_days: int = FREE_CANCEL_DAYS,
        half_days: int = HALF_FEE_DAYS
    ):
        if half_days < 0 or free_days <= half_days:
            raise ValueError(f"Invalid policy thresholds: free_days={free_days}, half_days={half_days}")
        self.tz = TimezoneManager(timezone)
        self.free_days = free_days
        self.half_days = half_days

    @classmethod
    def from_config(cls, timezone: str, policy: PolicyConfig) -> "CancellationPolicy":
        return cls(timezone, policy.free_days, policy.half_days)

    def days_until(self, lesson_start: datetime, now: datetime) -> int:
        """Calendar days from ``now`` to ``lesson_start``; a lesson later today is 0."""
        return self.tz.days_between(now, lesson_start)

    def tier_for(self, days_until: int) -> FeeTier:
        if days_until >= self.free_days:
            return FeeTier.FREE
        if days_until >= self.half_days:
            return FeeTier.HALF
        return FeeTier.FULL

    def evaluate(self, lesson_start: datetime, now: datetime, price: int | None = None) -> PolicyDecision:
        """Evaluate the cancellation fee for a lesson.

        Args:
            lesson_start: Lesson start time
            now: Time of the cancellation
            price: Lesson price in JPY, used to compute the fee amount

        Returns:
            PolicyDecision with tier, fee percent and customer-facing message
        """
        days = self.days_until(lesson_start, now)
        tier = self.tier_for(days)
        percent = FEE_PERCENT[tier]
        return PolicyDecision(
            tier=tier,
            fee_percent=percent,
            days_until=days,
            label=TIER_LABELS[tier],
            message=_message(tier, days, self.free_days),
            fee_amount=price * percent // 100 if price is not None else None,
        )

_default_policy = CancellationPolicy()

def evaluate(lesson_start: datetime, now: datetime, price: int | None = None) -> PolicyDecision:
    """Evaluate with the default thresholds in the default business timezone."""
    return _default_policy.evaluate(lesson_start, now, price)
