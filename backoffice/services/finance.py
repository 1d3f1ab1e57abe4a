# backoffice/services/finance.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, NamedTuple, Optional

from backoffice.models.purchase import PaymentStatus

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    if value is None:
        value = 0
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# due is derived, never accepted from the client
def compute_due(total, paid) -> Decimal:
    return to_money(total) - to_money(paid)


def derive_payment_status(total, paid) -> PaymentStatus:
    total, paid = to_money(total), to_money(paid)
    if paid <= 0:
        return PaymentStatus.UNPAID
    if paid >= total:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def item_subtotal(quantity, unit_cost, discount=None, tax=None) -> Decimal:
    return to_money(Decimal(quantity) * Decimal(unit_cost) - to_money(discount) + to_money(tax))


class PurchaseTotals(NamedTuple):
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_totals(
    item_subtotals: Iterable,
    tax_rate=None,
    discount=None,
    shipping=None,
    tax_amount: Optional[Decimal] = None,
) -> PurchaseTotals:
    """Header totals from line subtotals.

    tax_amount = subtotal * tax_rate / 100 unless given explicitly,
    total = subtotal + tax_amount - discount + shipping.
    """
    subtotal = to_money(sum((to_money(s) for s in item_subtotals), Decimal("0")))
    if tax_amount is None:
        tax_amount = subtotal * to_money(tax_rate) / Decimal(100)
    tax_amount = to_money(tax_amount)
    total = subtotal + tax_amount - to_money(discount) + to_money(shipping)
    return PurchaseTotals(subtotal, tax_amount, to_money(total))
