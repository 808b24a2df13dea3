"""
cycle_assigner.py
------------------
Maps a point-in-time event (a purchase, a payment) to the billing cycle that
contains it. Cycle ranges are closed on both ends: an event on the statement
date belongs to the cycle that closes that day.

Events are compared by calendar date, so a 3pm purchase on the closing date
still lands in that cycle.
"""

from datetime import date
from typing import Optional, Sequence

import pandas as pd

from core.calendar_utils import to_date
from core.models import BillingCycleProjection


def assign_transaction_to_cycle(
    transaction_date: date, cycles: Sequence[BillingCycleProjection]
) -> Optional[BillingCycleProjection]:
    """
    Returns the first cycle (in the order given) whose range contains
    transaction_date, or None.
    """
    event = to_date(transaction_date)
    for cycle in cycles:
        if cycle.cycle_start_date <= event <= cycle.cycle_end_date:
            return cycle
    return None


def assign_transactions(
    transactions: pd.DataFrame,
    cycles: Sequence[BillingCycleProjection],
    date_column: str = "transaction_date",
) -> pd.DataFrame:
    """
    Tag every transaction row with the cycle it falls in.

    Adds cycle_start_date, cycle_end_date and payment_due_date columns
    (NaT where no cycle matches). Rows with unparseable dates are left
    unmatched. Returns a copy.

    Raises:
        ValueError: If date_column is missing.
    """
    if date_column not in transactions.columns:
        raise ValueError(f"Missing required columns: {[date_column]}")

    df = transactions.copy()
    event_dates = pd.to_datetime(df[date_column], errors="coerce")

    matches = [
        assign_transaction_to_cycle(ts, cycles) if not pd.isna(ts) else None
        for ts in event_dates
    ]

    df["cycle_start_date"] = pd.to_datetime([m.cycle_start_date if m else None for m in matches])
    df["cycle_end_date"] = pd.to_datetime([m.cycle_end_date if m else None for m in matches])
    df["payment_due_date"] = pd.to_datetime([m.payment_due_date if m else None for m in matches])

    return df
