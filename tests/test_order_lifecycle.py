from datetime import date

import pytest

from app.domain.orders.lifecycle import is_terminal, validate_status_transition
from app.domain.orders.service import OrderService
from app.models import OrderStatus
from app.shared.exceptions import InvalidTransitionError, NotFoundError


@pytest.mark.parametrize(
    "current, new, allowed",
    [
        ("pending", "printed", True),
        ("pending", "cancelled", True),
        ("printed", "mailed", True),
        ("pending", "mailed", False),
        ("printed", "pending", False),
        ("printed", "cancelled", False),
        ("mailed", "printed", False),
        ("cancelled", "pending", False),
        ("pending", "pending", False),
    ],
)
def test_status_transitions(current, new, allowed):
    assert validate_status_transition(current, new) is allowed


def test_terminal_statuses():
    assert is_terminal("mailed")
    assert is_terminal("cancelled")
    assert not is_terminal("pending")
    assert not is_terminal("printed")


@pytest.fixture
def birthday(make_recipient):
    recipient = make_recipient("Mom", occasions=[("Birthday", date(1960, 5, 10))])
    return recipient.occasions[0]


def test_mark_printed_moves_only_pending_orders(db, birthday, make_recipient, make_order):
    pending = make_order(birthday)
    other = make_recipient("Dad", occasions=[("Birthday", date(1958, 8, 2))]).occasions[0]
    mailed = make_order(other, status=OrderStatus.MAILED.value)

    result = OrderService(db).mark_printed([pending.id, mailed.id, 9999])

    assert result["updated"] == [pending.id]
    assert {"order_id": mailed.id, "status": "mailed"} in result["skipped"]
    assert {"order_id": 9999, "status": "not_found"} in result["skipped"]

    db.refresh(pending)
    db.refresh(mailed)
    assert pending.status == "printed"
    assert pending.print_date is not None
    assert mailed.status == "mailed"


def test_mark_printed_twice_is_a_no_op(db, birthday, make_order):
    order = make_order(birthday)
    service = OrderService(db)

    assert service.mark_printed([order.id, order.id])["updated"] == [order.id]
    second = service.mark_printed([order.id])
    assert second["updated"] == []
    assert second["skipped"] == [{"order_id": order.id, "status": "printed"}]


def test_mark_mailed_requires_printed(db, birthday, make_order):
    order = make_order(birthday)
    service = OrderService(db)

    with pytest.raises(InvalidTransitionError) as exc_info:
        service.mark_mailed(order.id)
    assert exc_info.value.current_status == "pending"
    assert exc_info.value.target_status == "mailed"

    service.mark_printed([order.id])
    mailed = service.mark_mailed(order.id)
    assert mailed.status == "mailed"
    assert mailed.mail_date is not None

    with pytest.raises(InvalidTransitionError):
        service.mark_mailed(order.id)


def test_mark_mailed_unknown_order(db):
    with pytest.raises(NotFoundError):
        OrderService(db).mark_mailed(12345)


def test_cancel_only_from_pending(db, birthday, make_recipient, make_order):
    service = OrderService(db)
    order = make_order(birthday)
    assert service.cancel_order(order.id).status == "cancelled"

    other = make_recipient("Dad", occasions=[("Birthday", date(1958, 8, 2))]).occasions[0]
    printed = make_order(other, status=OrderStatus.PRINTED.value)
    with pytest.raises(InvalidTransitionError):
        service.cancel_order(printed.id)


def test_cancelled_order_cannot_be_printed(db, birthday, make_order):
    order = make_order(birthday, status=OrderStatus.CANCELLED.value)
    result = OrderService(db).mark_printed([order.id])
    assert result["updated"] == []
    assert result["skipped"] == [{"order_id": order.id, "status": "cancelled"}]
