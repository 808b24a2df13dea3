"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- HistoricalCycle: One observed billing cycle, supplied from outside the
  engine (bank sync or manual entry). Input only.

- BillingCyclePattern: The recurring schedule inferred from a history.
  Recomputed on every analysis call, never mutated.

- BillingCycleProjection: One projected (or known) cycle date range.

- PatternAnalysisResult: Pattern plus quality tier and human-readable
  insights for the UI.

- ConfidenceScore: Composite confidence with the factors that produced it.

All models are frozen value objects. Nothing in the engine caches them.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.calendar_utils import to_date


@dataclass(frozen=True)
class HistoricalCycle:
    """
    One observed billing cycle.

    Entries need not be contiguous and may arrive unsorted. Datetimes are
    truncated to their calendar date on construction.
    """

    statement_date: date
    due_date: date
    statement_balance: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "statement_date", to_date(self.statement_date))
        object.__setattr__(self, "due_date", to_date(self.due_date))


@dataclass(frozen=True)
class BillingCyclePattern:
    """Inferred recurring schedule for one account."""

    typical_cycle_length: int               # Days. Usually 28–31, not clamped.
    statement_day_of_month: Optional[int]   # 1–31, None = no consistent day
    due_date_offset: int                    # Days from statement to due date
    confidence: float                       # 0.0 – 1.0


@dataclass(frozen=True)
class BillingCycleProjection:
    """
    One billing cycle date range.

    cycle_start_date <= event <= cycle_end_date defines membership.
    cycle_end_date is the statement closing date.
    """

    cycle_start_date: date
    cycle_end_date: date
    payment_due_date: date
    is_projected: bool
    confidence: float


@dataclass(frozen=True)
class PatternAnalysisResult:
    pattern: BillingCyclePattern
    quality: str                            # "high" | "medium" | "low"
    insights: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ConfidenceScore:
    """
    Actionable confidence for a single cycle, with the inputs that produced
    it so the UI can explain the number.
    """

    overall: float
    data_source: str                        # "plaid" | "inferred" | "manual"
    data_age_hours: float
    pattern_confidence: float
    display_message: str
