from datetime import date, timedelta

import pytest

from app.domain.calendar.delivery_window import DeliveryWindowPolicy
from app.domain.orders.repository import OrderRepository
from app.models import Order
from app.services.order_automation import apply_credit, create_due_orders
from app.shared.exceptions import ConflictError

BIRTHDAY = date(1960, 5, 10)


def test_birthday_fifteen_days_out_creates_pending_order(db, account, make_recipient):
    recipient = make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 4, 25))

    assert summary["created"] == 1
    order = db.get(Order, summary["created_order_ids"][0])
    assert order.status == "pending"
    assert order.occasion_date == date(2025, 5, 10)
    assert order.target_year == 2025
    assert order.card_type == "subscription"
    assert order.recipient_name == "Mom Smith"
    assert order.recipient_city == "Portland"
    assert order.return_name == "Pat Owner"
    assert order.return_zip == "62701"
    assert order.card_variation == "thinking_of_you"

    db.refresh(recipient)
    assert recipient.occasions[0].last_sent_year == 2025


def test_rerun_on_same_day_creates_nothing(db, account, make_recipient):
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    first = create_due_orders(db, today=date(2025, 4, 25))
    second = create_due_orders(db, today=date(2025, 4, 25))

    assert first["created"] == 1
    assert second["created"] == 0
    assert second["skipped_occasions"][0]["reason"] == "already_sent"
    assert db.query(Order).count() == 1


def test_order_snapshot_survives_recipient_edit(db, account, make_recipient):
    recipient = make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])
    summary = create_due_orders(db, today=date(2025, 4, 25))

    recipient.street = "99 New Rd"
    db.commit()

    order = db.get(Order, summary["created_order_ids"][0])
    assert order.recipient_street == "10 Elm St"


def test_inside_lead_time_is_deferred(db, account, make_recipient):
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 5, 1))

    assert summary["deferred"] == 1
    assert summary["created"] == 0
    assert db.query(Order).count() == 0


def test_far_away_occasion_is_not_due_yet(db, account, make_recipient):
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 3, 1))

    assert summary["not_due"] == 1
    assert db.query(Order).count() == 0


def test_missed_runs_are_caught_up_within_order_window(db, account, make_recipient):
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 4, 20))

    assert summary["created"] == 1


def test_holidays_resolve_for_the_run_year(db, account, make_recipient):
    make_recipient("Mom", occasions=[("Mother's Day", None), ("Christmas", None)])

    summary = create_due_orders(db, today=date(2025, 4, 26))
    assert summary["created"] == 1
    order = db.get(Order, summary["created_order_ids"][0])
    assert order.occasion_type == "Mother's Day"
    assert order.occasion_date == date(2025, 5, 11)

    summary = create_due_orders(db, today=date(2025, 12, 10))
    assert summary["created"] == 1
    order = db.get(Order, summary["created_order_ids"][0])
    assert order.occasion_date == date(2025, 12, 25)


def test_subscription_allotment_then_no_capacity(db, account, make_recipient):
    account.plan = "basic"
    db.commit()
    for i in range(6):
        make_recipient(f"Friend{i}", relationship="Friend", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 4, 25))

    assert summary["created"] == 5
    assert summary["skipped"] == 1
    assert summary["skipped_occasions"][0]["reason"] == "no_capacity"


def test_card_credit_used_when_no_subscription(db, account, make_recipient):
    account.subscription_status = "cancelled"
    account.card_credits = 1
    db.commit()
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 4, 25))

    order = db.get(Order, summary["created_order_ids"][0])
    assert order.card_type == "individual"
    db.refresh(account)
    assert account.card_credits == 0


def test_missing_return_address_skips(db, account, make_recipient):
    account.return_street = None
    db.commit()
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 4, 25))

    assert summary["created"] == 0
    assert summary["skipped_occasions"][0]["reason"] == "missing_return_address"


def test_one_bad_occasion_does_not_stop_the_batch(db, account, make_recipient):
    bad = make_recipient("Bad", occasions=[("Arbor Day", None)])
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])

    summary = create_due_orders(db, today=date(2025, 4, 25))

    assert summary["failed"] == 1
    assert summary["failures"][0]["occasion_id"] == bad.occasions[0].id
    assert summary["failures"][0]["error"] == "ConfigurationError"
    assert summary["created"] == 1


def test_existing_order_for_cycle_is_skipped(db, account, make_recipient, make_order):
    recipient = make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])
    make_order(recipient.occasions[0], occasion_date=date(2025, 5, 10))

    summary = create_due_orders(db, today=date(2025, 4, 25))

    assert summary["created"] == 0
    assert summary["skipped_occasions"][0]["reason"] == "order_exists"
    assert db.query(Order).count() == 1


def test_concurrent_duplicate_turns_into_skip(db, account, make_recipient, make_order, monkeypatch):
    recipient = make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])
    make_order(recipient.occasions[0], occasion_date=date(2025, 5, 10))
    # Another run inserted the order after this run's existence check
    monkeypatch.setattr(OrderRepository, "order_exists", staticmethod(lambda db, oid, year: False))

    summary = create_due_orders(db, today=date(2025, 4, 25))

    assert summary["created"] == 0
    assert summary["failed"] == 0
    assert summary["skipped_occasions"][0]["reason"] == "order_exists"
    assert db.query(Order).count() == 1


def test_just_because_uses_stored_date(db, account, make_recipient):
    recipient = make_recipient("Mom", occasions=[("Just Because", None)])
    occasion = recipient.occasions[0]
    occasion.computed_send_date = date(2025, 8, 20)
    db.commit()

    summary = create_due_orders(db, today=date(2025, 8, 5))

    assert summary["created"] == 1
    order = db.get(Order, summary["created_order_ids"][0])
    assert order.occasion_type == "Just Because"
    assert order.occasion_date == date(2025, 8, 20)
    assert order.card_variation == "thinking_of_you"

    second = create_due_orders(db, today=date(2025, 8, 5))
    assert second["created"] == 0


def test_just_because_selected_outside_lead_time(db, account, make_recipient):
    recipient = make_recipient(
        "Mom", occasions=[("Birthday", BIRTHDAY), ("Just Because", None)]
    )
    today = date(2025, 2, 1)

    summary = create_due_orders(db, today=today)

    db.refresh(recipient)
    jb = next(o for o in recipient.occasions if o.is_just_because)
    assert jb.computed_send_date is not None
    assert jb.computed_send_date >= today + timedelta(days=15)
    assert jb.card_variation == "thinking_of_you"
    assert summary["failed"] == 0


def test_just_because_inside_lead_time_moves_to_next_cycle(db, account, make_recipient):
    recipient = make_recipient("Sam", relationship="Romantic", occasions=[("Just Because", None)])
    occasion = recipient.occasions[0]
    occasion.computed_send_date = date(2025, 8, 10)
    db.commit()

    summary = create_due_orders(db, today=date(2025, 8, 5))

    assert summary["deferred"] == 1
    db.refresh(occasion)
    assert occasion.computed_send_date.year == 2026


def test_custom_policy(db, account, make_recipient):
    make_recipient("Mom", occasions=[("Birthday", BIRTHDAY)])
    policy = DeliveryWindowPolicy(lead_time_days=5, order_window_days=0)

    assert create_due_orders(db, today=date(2025, 5, 4), policy=policy)["not_due"] == 1
    assert create_due_orders(db, today=date(2025, 5, 5), policy=policy)["created"] == 1


def test_apply_credit_creates_individual_order(db, account, make_recipient):
    account.card_credits = 2
    db.commit()
    recipient = make_recipient("Mom", occasions=[("Just Because", None)])
    occasion = recipient.occasions[0]

    order = apply_credit(db, occasion, date(2025, 3, 1), 15)

    assert order.card_type == "individual"
    assert order.occasion_date >= date(2025, 3, 16)
    db.refresh(account)
    assert account.card_credits == 1


def test_apply_credit_conflicts(db, account, make_recipient):
    recipient = make_recipient("Mom", occasions=[("Birthday", BIRTHDAY), ("Just Because", None)])
    birthday, jb = recipient.occasions

    for occasion in (birthday, jb):
        with pytest.raises(ConflictError) as exc_info:
            apply_credit(db, occasion, date(2025, 3, 1), 15)
        assert exc_info.value.confirmable is False
