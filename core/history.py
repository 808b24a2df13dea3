"""
history.py
-----------
Boundary layer between loosely-shaped upstream records and the engine.

The bank sync and manual-entry paths hand over dict rows or DataFrames with
string, datetime or Timestamp dates. This module validates and converts them
into HistoricalCycle values once, so the analyzer only ever sees clean input.
"""

import logging
from typing import Any, Iterable, List, Mapping

import pandas as pd

from core.models import HistoricalCycle

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["statement_date", "due_date"]


def prepare_history_frame(history: pd.DataFrame) -> pd.DataFrame:
    """
    Validates columns, parses dates and drops rows that cannot be parsed.

    Returns a copy; the caller's frame is never modified.

    Raises:
        ValueError: If a required column is missing.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in history.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df = history.copy()
    for col in REQUIRED_COLUMNS:
        df[col] = pd.to_datetime(df[col], errors="coerce")

    invalid = df[REQUIRED_COLUMNS].isna().any(axis=1)
    if invalid.any():
        logger.warning(f"Dropping {int(invalid.sum()):,} history rows with unparseable dates.")
        df = df[~invalid].copy()

    if "statement_balance" in df.columns:
        df["statement_balance"] = pd.to_numeric(df["statement_balance"], errors="coerce")
    else:
        df["statement_balance"] = float("nan")

    return df


def cycles_from_frame(history: pd.DataFrame) -> List[HistoricalCycle]:
    """Converts a history DataFrame into HistoricalCycle values, in row order."""
    df = prepare_history_frame(history)
    return [
        HistoricalCycle(
            statement_date=row.statement_date,
            due_date=row.due_date,
            statement_balance=None if pd.isna(row.statement_balance) else float(row.statement_balance),
        )
        for row in df.itertuples(index=False)
    ]


def cycles_from_records(records: Iterable[Mapping[str, Any]]) -> List[HistoricalCycle]:
    """Converts dict-like rows (e.g. parsed JSON) into HistoricalCycle values."""
    rows = list(records)
    if not rows:
        return []
    return cycles_from_frame(pd.DataFrame(rows))
