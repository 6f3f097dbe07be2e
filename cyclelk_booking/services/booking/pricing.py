"""
Rental pricing.

Charged price:
  1. Start instant = start date + start time (00:00 when omitted),
     end instant = end date + end time (23:59 when omitted).
  2. Every started 24-hour block is charged as a full day.
  3. total = days × per-day rate, plus the delivery fee once when a
     delivery address is given and the bike has a fee. A period of zero
     days costs nothing, fee included.

Package estimates (weekly/monthly) are shown on bike details only and are
never used to charge a booking.
"""

import math
from typing import Optional

from ...core.models.booking import PackageEstimate, PriceQuote
from ...core.models.catalog import Bike, BikePricing
from ...utils.date import DEFAULT_END_TIME, DEFAULT_START_TIME, compose_instant


# ── Constants ──────────────────────────────────────────────

HOURS_PER_DAY = 24
WEEKLY_FALLBACK_DAYS = 6    # one day free
MONTHLY_FALLBACK_DAYS = 25  # five days free


# ── Core Functions ─────────────────────────────────────────

def rental_hours(
    start_date: str,
    start_time: Optional[str],
    end_date: str,
    end_time: Optional[str],
) -> float:
    """Length of the rental in hours; negative when end precedes start."""
    start = compose_instant(start_date, start_time, DEFAULT_START_TIME)
    end = compose_instant(end_date, end_time, DEFAULT_END_TIME)
    return (end - start).total_seconds() / 3600


def rental_days(
    start_date: str,
    start_time: Optional[str],
    end_date: str,
    end_time: Optional[str],
) -> int:
    """
    Number of charged days.

    Partial days round up. A zero or negative duration yields 0 rather than
    an error; rejecting such periods is the rental period form's job.
    """
    hours = rental_hours(start_date, start_time, end_date, end_time)
    if hours <= 0:
        return 0
    return math.ceil(hours / HOURS_PER_DAY)


def calculate_price(
    bike: Bike,
    start_date: Optional[str],
    start_time: Optional[str],
    end_date: Optional[str],
    end_time: Optional[str],
    delivery_address: Optional[str] = None,
    currency: str = "LKR",
) -> PriceQuote:
    """
    Calculate the authoritative charge for renting ``bike``.

    Args:
        bike: Selected bike; its ``pricing.per_day`` drives the charge
        start_date, start_time: Pickup date (YYYY-MM-DD) and time (HH:MM)
        end_date, end_time: Return date and time
        delivery_address: Non-empty when the bike should be delivered
        currency: Currency code carried on the quote

    Returns:
        PriceQuote with days, base price, delivery fee and total
    """
    per_day = bike.pricing.per_day

    days = 0
    if start_date and end_date:
        days = rental_days(start_date, start_time, end_date, end_time)

    base_price = days * per_day

    delivery_fee = 0.0
    if days and delivery_address and delivery_address.strip() and bike.pricing.delivery_fee:
        delivery_fee = bike.pricing.delivery_fee

    return PriceQuote(
        days=days,
        per_day=per_day,
        base_price=base_price,
        delivery_fee=delivery_fee,
        total=base_price + delivery_fee,
        currency=currency,
    )


def estimate_packages(pricing: BikePricing, currency: str = "LKR") -> PackageEstimate:
    """Weekly and monthly rates for display, falling back to day multiples."""
    weekly = pricing.per_week or pricing.per_day * WEEKLY_FALLBACK_DAYS
    monthly = pricing.per_month or pricing.per_day * MONTHLY_FALLBACK_DAYS
    return PackageEstimate(
        per_day=pricing.per_day,
        weekly=weekly,
        monthly=monthly,
        weekly_saving=max(pricing.per_day * 7 - weekly, 0),
        currency=currency,
    )
