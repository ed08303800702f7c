from datetime import date, timedelta

from app.domain.calendar import delivery_window, holidays
from app.domain.calendar.delivery_window import DeliveryWindowPolicy
from app.domain.calendar.recurrence import next_occurrence

TODAY = date(2025, 3, 1)


def test_exactly_lead_time_away_is_not_deferred():
    decision = delivery_window.evaluate(TODAY + timedelta(days=15), TODAY, 15)
    assert decision.is_deferred is False
    assert decision.days_until == 15
    assert decision.fulfillment_date == TODAY + timedelta(days=15)


def test_one_day_short_of_lead_time_is_deferred():
    target = TODAY + timedelta(days=14)
    decision = delivery_window.evaluate(target, TODAY, 15)
    assert decision.is_deferred is True
    assert decision.fulfillment_date == date(2026, target.month, target.day)
    assert decision.fulfillment_year == 2026


def test_deferred_holiday_uses_next_cycle_resolver():
    target = holidays.resolve("Mother's Day", 2025)
    decision = delivery_window.evaluate(
        target, target - timedelta(days=3), 15, lambda year: holidays.resolve("Mother's Day", year)
    )
    assert decision.is_deferred is True
    assert decision.fulfillment_date == date(2026, 5, 10)


def test_deferred_feb_29_falls_back_to_march_1():
    decision = delivery_window.evaluate(date(2024, 2, 29), date(2024, 2, 20), 15)
    assert decision.fulfillment_date == date(2025, 3, 1)


def test_policy_due_window():
    policy = DeliveryWindowPolicy(lead_time_days=15, order_window_days=7)
    for days, due in [(14, False), (15, True), (22, True), (23, False), (200, False)]:
        decision = policy.evaluate(TODAY + timedelta(days=days), TODAY)
        assert policy.is_due(decision) is due, days


def test_mom_birthday_nine_days_out_is_deferred_to_next_year():
    reference = date(2025, 5, 1)
    target = next_occurrence(5, 10, reference)
    assert target == date(2025, 5, 10)

    decision = delivery_window.evaluate(target, reference, 15)
    assert decision.days_until == 9
    assert decision.is_deferred is True
    assert decision.fulfillment_date == date(2026, 5, 10)
