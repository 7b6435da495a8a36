"""
Outstanding-balance arithmetic for a booking.

Two screens compute the balance and they count days differently:

* the booked-rooms list bills every started 24 hour period since check-in
  (``days_stayed_elapsed``) and credits every payment on the booking;
* the checkout screen bills the check-in day plus every full 24 hour
  period since check-in (``days_stayed_calendar``) and credits only
  ``extension`` payments.

Both rules are kept as they are, each on its own screen. They only differ
when the stay is an exact multiple of 24 hours: a stay of exactly one day
is one day on the booked-rooms list and two days at checkout.

Everything here is pure: callers pass the evaluation instant and the facts
they fetched, and recompute on every load.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable

from ..models import PaymentType, PurchaseStatus

SECONDS_PER_DAY = 24 * 60 * 60


class DayRule(str, Enum):
    ELAPSED = "elapsed"
    CALENDAR = "calendar"


@dataclass(frozen=True)
class BillSummary:
    rule: DayRule
    days_stayed: int
    rent_per_day: float
    total_rent: float
    initial_payment: float
    payments_credited: float
    total_purchases: float
    amount_due: float


def _money(value) -> float:
    if value is None:
        return 0.0
    return float(value)


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def days_stayed_elapsed(check_in: date | datetime, now: datetime) -> int:
    """Started 24 hour periods since check-in, at least one."""
    elapsed = (now - _as_datetime(check_in)).total_seconds() / SECONDS_PER_DAY
    return max(1, math.ceil(elapsed))


def days_stayed_calendar(check_in: date | datetime, now: datetime) -> int:
    """The check-in day plus every full 24 hour period since check-in."""
    elapsed = (now - _as_datetime(check_in)).total_seconds()
    return max(1, int(elapsed // SECONDS_PER_DAY) + 1)


def pending_purchase_total(purchases: Iterable) -> float:
    return sum(
        (_money(p.amount) for p in purchases if p.payment_status == PurchaseStatus.PENDING),
        0.0,
    )


def booked_rooms_bill(
    *,
    check_in: date | datetime,
    rent_per_day,
    initial_payment,
    payments: Iterable,
    purchases: Iterable,
    now: datetime,
) -> BillSummary:
    days = days_stayed_elapsed(check_in, now)
    rent = _money(rent_per_day)
    total_rent = days * rent
    initial = _money(initial_payment)
    total_payments = sum((_money(p.amount) for p in payments), 0.0)
    total_purchases = pending_purchase_total(purchases)
    due = total_rent + total_purchases - initial - total_payments
    return BillSummary(
        rule=DayRule.ELAPSED,
        days_stayed=days,
        rent_per_day=rent,
        total_rent=total_rent,
        initial_payment=initial,
        payments_credited=total_payments,
        total_purchases=total_purchases,
        amount_due=max(0.0, due),
    )


def checkout_bill(
    *,
    check_in: date | datetime,
    rent_per_day,
    initial_payment,
    payments: Iterable,
    purchases: Iterable,
    now: datetime,
) -> BillSummary:
    days = days_stayed_calendar(check_in, now)
    rent = _money(rent_per_day)
    total_rent = days * rent
    initial = _money(initial_payment)
    # check_in payments are already represented by initial_payment and
    # purchase payments settled their own purchases
    advance = sum(
        (_money(p.amount) for p in payments if p.payment_type == PaymentType.EXTENSION),
        0.0,
    )
    total_purchases = pending_purchase_total(purchases)
    due = total_rent - initial - advance + total_purchases
    return BillSummary(
        rule=DayRule.CALENDAR,
        days_stayed=days,
        rent_per_day=rent,
        total_rent=total_rent,
        initial_payment=initial,
        payments_credited=advance,
        total_purchases=total_purchases,
        amount_due=max(0.0, due),
    )


def bill_for_booking(booking, now: datetime, rule: DayRule) -> BillSummary:
    """Run the rule's calculator over a loaded booking and its related rows."""
    calculate = booked_rooms_bill if rule == DayRule.ELAPSED else checkout_bill
    return calculate(
        check_in=booking.check_in_date,
        rent_per_day=booking.rent_per_day,
        initial_payment=booking.initial_payment,
        payments=booking.payments,
        purchases=booking.purchases,
        now=now,
    )
