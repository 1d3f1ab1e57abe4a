from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.models.purchase import PurchaseStatus
from backoffice.services.ledger import net_deltas
from backoffice.services.status import is_received, transition_deltas

PENDING = PurchaseStatus.PENDING
ORDERED = PurchaseStatus.ORDERED
RECEIVED = PurchaseStatus.RECEIVED
CANCELLED = PurchaseStatus.CANCELLED

ITEMS = [
    SimpleNamespace(product_id=1, quantity=Decimal("3")),
    SimpleNamespace(product_id=2, quantity=Decimal("5")),
]


def _net(deltas):
    return {pid: qty for pid, qty in net_deltas(deltas).items() if qty}


def test_is_received():
    assert is_received(RECEIVED)
    assert is_received("received")
    assert not is_received(PENDING)
    assert not is_received(None)


def test_create_received_applies_items():
    assert _net(transition_deltas(None, RECEIVED, [], ITEMS)) == {1: Decimal("3"), 2: Decimal("5")}


@pytest.mark.parametrize("status", [PENDING, ORDERED, CANCELLED])
def test_create_not_received_moves_nothing(status):
    assert _net(transition_deltas(None, status, [], ITEMS)) == {}


@pytest.mark.parametrize("old, new, sign", [
    (PENDING, RECEIVED, 1),
    (ORDERED, RECEIVED, 1),
    (CANCELLED, RECEIVED, 1),
    (RECEIVED, PENDING, -1),
    (RECEIVED, CANCELLED, -1),
    (RECEIVED, ORDERED, -1),
])
def test_crossing_received_boundary(old, new, sign):
    assert _net(transition_deltas(old, new, ITEMS)) == {1: sign * Decimal("3"), 2: sign * Decimal("5")}


@pytest.mark.parametrize("old, new", [
    (RECEIVED, RECEIVED),
    (PENDING, ORDERED),
    (ORDERED, CANCELLED),
    (CANCELLED, PENDING),
])
def test_same_side_of_boundary_is_a_no_op(old, new):
    assert transition_deltas(old, new, ITEMS) == []


def test_delete_received_reverses_items():
    assert _net(transition_deltas(RECEIVED, None, ITEMS)) == {1: Decimal("-3"), 2: Decimal("-5")}


def test_replacing_items_while_received_nets_the_difference():
    new_items = [
        SimpleNamespace(product_id=1, quantity=Decimal("4")),
        SimpleNamespace(product_id=3, quantity=Decimal("1")),
    ]
    assert _net(transition_deltas(RECEIVED, RECEIVED, ITEMS, new_items)) == {
        1: Decimal("1"), 2: Decimal("-5"), 3: Decimal("1"),
    }


def test_replacing_items_and_leaving_received():
    new_items = [SimpleNamespace(product_id=1, quantity=Decimal("10"))]
    assert _net(transition_deltas(RECEIVED, PENDING, ITEMS, new_items)) == {1: Decimal("-3"), 2: Decimal("-5")}
