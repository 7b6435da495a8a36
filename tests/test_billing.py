"""
Tests for the billing calculator.
All inputs are plain facts; the evaluation instant is always passed in.
"""
from datetime import date, datetime, timedelta
from types import SimpleNamespace

import pytest

from frontdesk.services.billing import (
    DayRule,
    booked_rooms_bill,
    checkout_bill,
    days_stayed_calendar,
    days_stayed_elapsed,
)

CHECK_IN = datetime(2025, 3, 1, 10, 0)


def payment(amount, payment_type="extension"):
    return SimpleNamespace(amount=amount, payment_type=payment_type)


def purchase(amount, payment_status="pending"):
    return SimpleNamespace(amount=amount, payment_status=payment_status)


class TestDayCounting:

    def test_elapsed_rule_is_one_day_right_after_check_in(self):
        assert days_stayed_elapsed(CHECK_IN, CHECK_IN) == 1
        assert days_stayed_elapsed(CHECK_IN, CHECK_IN + timedelta(seconds=1)) == 1

    def test_elapsed_rule_counts_started_days(self):
        assert days_stayed_elapsed(CHECK_IN, CHECK_IN + timedelta(hours=24)) == 1
        assert days_stayed_elapsed(CHECK_IN, CHECK_IN + timedelta(hours=25)) == 2
        assert days_stayed_elapsed(CHECK_IN, CHECK_IN + timedelta(days=3, minutes=1)) == 4

    def test_checkout_rule_counts_check_in_day_plus_full_days(self):
        assert days_stayed_calendar(CHECK_IN, CHECK_IN) == 1
        assert days_stayed_calendar(CHECK_IN, datetime(2025, 3, 1, 23, 59)) == 1
        # 71 hours: two full days after the check-in day
        assert days_stayed_calendar(CHECK_IN, datetime(2025, 3, 4, 9, 0)) == 3

    def test_overnight_stay_is_one_day_under_both_rules(self):
        arrival = datetime(2025, 3, 1, 14, 0)
        departure = datetime(2025, 3, 2, 11, 0)
        assert days_stayed_elapsed(arrival, departure) == 1
        assert days_stayed_calendar(arrival, departure) == 1

    def test_rules_differ_only_at_whole_days(self):
        for hours in (24, 48, 72):
            now = CHECK_IN + timedelta(hours=hours)
            assert days_stayed_calendar(CHECK_IN, now) == days_stayed_elapsed(CHECK_IN, now) + 1
        for hours in (1, 23, 25, 47.5, 71):
            now = CHECK_IN + timedelta(hours=hours)
            assert days_stayed_calendar(CHECK_IN, now) == days_stayed_elapsed(CHECK_IN, now)

    def test_never_below_one_even_with_clock_behind_check_in(self):
        earlier = CHECK_IN - timedelta(days=2)
        assert days_stayed_elapsed(CHECK_IN, earlier) == 1
        assert days_stayed_calendar(CHECK_IN, earlier) == 1

    def test_accepts_plain_dates(self):
        assert days_stayed_calendar(date(2025, 3, 1), datetime(2025, 3, 2, 12, 0)) == 2
        assert days_stayed_elapsed(date(2025, 3, 1), datetime(2025, 3, 2, 12, 0)) == 2


class TestBookedRoomsBill:

    def test_same_day_stay_covered_by_initial_payment(self):
        bill = booked_rooms_bill(
            check_in=CHECK_IN, rent_per_day=500, initial_payment=500,
            payments=[], purchases=[], now=CHECK_IN,
        )
        assert bill.rule == DayRule.ELAPSED
        assert bill.days_stayed == 1
        assert bill.total_rent == 500
        assert bill.amount_due == 0

    def test_payment_after_purchase_is_clamped_to_zero(self):
        bill = booked_rooms_bill(
            check_in=CHECK_IN, rent_per_day=500, initial_payment=500,
            payments=[payment(200)], purchases=[purchase(150)], now=CHECK_IN,
        )
        # 500 + 150 - 500 - 200 would be -50
        assert bill.amount_due == 0

    def test_counts_every_payment_type(self):
        bill = booked_rooms_bill(
            check_in=CHECK_IN, rent_per_day=400, initial_payment=0,
            payments=[payment(100, "check_in"), payment(50, "purchase"), payment(25)],
            purchases=[], now=CHECK_IN + timedelta(hours=30),
        )
        assert bill.days_stayed == 2
        assert bill.payments_credited == 175
        assert bill.amount_due == 800 - 175

    def test_only_pending_purchases_are_billed(self):
        bill = booked_rooms_bill(
            check_in=CHECK_IN, rent_per_day=100, initial_payment=100,
            payments=[], purchases=[purchase(60), purchase(40, "paid")], now=CHECK_IN,
        )
        assert bill.total_purchases == 60
        assert bill.amount_due == 60


class TestCheckoutBill:

    def test_pending_purchase_is_added_to_bill(self):
        bill = checkout_bill(
            check_in=CHECK_IN, rent_per_day=500, initial_payment=500,
            payments=[], purchases=[purchase(150)], now=CHECK_IN,
        )
        assert bill.rule == DayRule.CALENDAR
        assert bill.amount_due == 150

    def test_only_extension_payments_are_credited(self):
        bill = checkout_bill(
            check_in=CHECK_IN, rent_per_day=500, initial_payment=500,
            payments=[payment(500, "check_in"), payment(80, "purchase"), payment(200)],
            purchases=[purchase(150)], now=datetime(2025, 3, 2, 11, 0),
        )
        assert bill.days_stayed == 2
        assert bill.payments_credited == 200
        assert bill.amount_due == 1000 - 500 - 200 + 150

    def test_zero_and_missing_rent_are_billed_as_is(self):
        for rent in (0, None):
            bill = checkout_bill(
                check_in=CHECK_IN, rent_per_day=rent, initial_payment=0,
                payments=[], purchases=[purchase(30)], now=CHECK_IN + timedelta(days=5),
            )
            assert bill.total_rent == 0
            assert bill.amount_due == 30


@pytest.mark.parametrize("calculate", [booked_rooms_bill, checkout_bill])
@pytest.mark.parametrize(
    "rent, initial, paid, pending",
    [
        (500, 5000, [], []),
        (0, 0, [1000], []),
        (250, 100, [400, 400], [20]),
        (1000, 0, [], [5, 10]),
    ],
)
def test_amount_due_is_never_negative(calculate, rent, initial, paid, pending):
    bill = calculate(
        check_in=CHECK_IN, rent_per_day=rent, initial_payment=initial,
        payments=[payment(a) for a in paid], purchases=[purchase(a) for a in pending],
        now=CHECK_IN + timedelta(days=2),
    )
    assert bill.amount_due >= 0
    assert bill.days_stayed >= 1
