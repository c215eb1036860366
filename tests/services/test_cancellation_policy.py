"""Tests for the cancellation fee policy."""

from datetime import datetime

import pytest

from conftest import FIXED_NOW, UTC, jst
from golflesson.config.types import PolicyConfig
from golflesson.models.reservation import FeeTier
from golflesson.services.cancellation_policy import CancellationPolicy, evaluate


@pytest.fixture
def policy():
    return CancellationPolicy()

@pytest.mark.parametrize("lesson_day, expected_days, expected_tier, expected_percent", [
    (jst(2025, 3, 11, 10, 0), 10, FeeTier.FREE, 0),
    (jst(2025, 3, 8, 10, 0), 7, FeeTier.FREE, 0),
    (jst(2025, 3, 7, 10, 0), 6, FeeTier.HALF, 50),
    (jst(2025, 3, 4, 10, 0), 3, FeeTier.HALF, 50),
    (jst(2025, 3, 3, 10, 0), 2, FeeTier.FULL, 100),
    (jst(2025, 3, 1, 18, 0), 0, FeeTier.FULL, 100),
    (jst(2025, 2, 27, 10, 0), -2, FeeTier.FULL, 100),
])
def test_tier_boundaries(policy, lesson_day, expected_days, expected_tier, expected_percent):
    """Fee tier follows the calendar day thresholds 7 and 3."""
    decision = policy.evaluate(lesson_day, FIXED_NOW)
    assert decision.days_until == expected_days
    assert decision.tier is expected_tier
    assert decision.fee_percent == expected_percent
    assert decision.requires_approval is (expected_tier is not FeeTier.FREE)

def test_calendar_days_ignore_time_of_day(policy):
    """Late-night cancellation counts whole dates, not 24 hour periods."""
    now = jst(2025, 3, 1, 23, 59)
    lesson = jst(2025, 3, 8, 0, 1)
    decision = policy.evaluate(lesson, now)
    assert decision.days_until == 7
    assert decision.tier is FeeTier.FREE

def test_lesson_later_today_is_zero_days(policy):
    decision = policy.evaluate(jst(2025, 3, 1, 23, 0), jst(2025, 3, 1, 0, 5))
    assert decision.days_until == 0
    assert "当日" in decision.message

def test_dates_are_taken_in_tokyo(policy):
    """A UTC evening is already the next day in Tokyo."""
    now = datetime(2025, 3, 1, 16, 0, tzinfo=UTC)  # 2025-03-02 01:00 in Tokyo
    lesson = jst(2025, 3, 8, 10, 0)
    decision = policy.evaluate(lesson, now)
    assert decision.days_until == 6
    assert decision.tier is FeeTier.HALF

def test_fee_amounts(policy):
    """Fee is price times percent, rounded down to whole yen."""
    assert policy.evaluate(jst(2025, 3, 20, 10, 0), FIXED_NOW, 13000).fee_amount == 0
    assert policy.evaluate(jst(2025, 3, 5, 10, 0), FIXED_NOW, 13000).fee_amount == 6500
    assert policy.evaluate(jst(2025, 3, 2, 10, 0), FIXED_NOW, 13000).fee_amount == 13000
    assert policy.evaluate(jst(2025, 3, 5, 10, 0), FIXED_NOW, 12345).fee_amount == 6172
    assert policy.evaluate(jst(2025, 3, 5, 10, 0), FIXED_NOW).fee_amount is None

def test_labels_and_messages(policy):
    free = policy.evaluate(jst(2025, 3, 20, 10, 0), FIXED_NOW)
    half = policy.evaluate(jst(2025, 3, 5, 10, 0), FIXED_NOW)
    full = policy.evaluate(jst(2025, 3, 2, 10, 0), FIXED_NOW)

    assert free.label == "無料キャンセル"
    assert "7日前以上" in free.message
    assert half.label == "キャンセル料50%"
    assert "レッスンまで4日" in half.message
    assert full.label == "キャンセル料100%"
    assert "100%" in full.message

def test_custom_thresholds():
    policy = CancellationPolicy.from_config("Asia/Tokyo", PolicyConfig(free_days=10, half_days=5))
    assert policy.evaluate(jst(2025, 3, 11, 10, 0), FIXED_NOW).tier is FeeTier.FREE
    assert policy.evaluate(jst(2025, 3, 10, 10, 0), FIXED_NOW).tier is FeeTier.HALF
    assert policy.evaluate(jst(2025, 3, 5, 10, 0), FIXED_NOW).tier is FeeTier.FULL
    assert "10日前以上" in policy.evaluate(jst(2025, 3, 20, 10, 0), FIXED_NOW).message

@pytest.mark.parametrize("free_days, half_days", [(3, 3), (2, 5), (7, -1)])
def test_invalid_thresholds(free_days, half_days):
    with pytest.raises(ValueError):
        CancellationPolicy(free_days=free_days, half_days=half_days)

def test_module_level_evaluate_uses_defaults():
    decision = evaluate(jst(2025, 3, 6, 9, 0), FIXED_NOW, 30000)
    assert decision.tier is FeeTier.HALF
    assert decision.fee_amount == 15000
