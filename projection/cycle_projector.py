"""
cycle_projector.py
-------------------
Extrapolates a BillingCyclePattern forward in time.

Starting from the last known statement date, each step produces the next
cycle's start, statement (end) and payment due dates. Confidence decays
linearly with distance from the last observation and is floored at 0, so
projections 20+ cycles out report zero confidence instead of a negative one.

Step logic:
    1. Next statement: if the pattern has a statement day, advance one
       calendar month and clip the day to the month end. Otherwise advance
       typical_cycle_length days.
    2. Cycle start: the day after the previous statement.
    3. Due date: next statement + due_date_offset days.
"""

from datetime import timedelta
from typing import Iterator, List

from config.config_loader import get_projection_config
from core.calendar_utils import add_months, adjust_for_month_end
from core.models import BillingCyclePattern, BillingCycleProjection, HistoricalCycle


class CycleProjector:
    """
    Projects future billing cycles from a detected pattern.

    Usage:
        projector = CycleProjector()
        projections = projector.project(last_known_cycle, pattern, months_ahead=6)
    """

    def __init__(self):
        self.config = get_projection_config()
        self.default_months_ahead = self.config["default_months_ahead"]
        self.decay_per_cycle = self.config["confidence_decay_per_cycle"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def project(
        self,
        last_known_cycle: HistoricalCycle,
        pattern: BillingCyclePattern,
        months_ahead: int | None = None,
    ) -> List[BillingCycleProjection]:
        """
        Project future billing cycles.

        Args:
            last_known_cycle: Most recent observed cycle. Projection starts
                after its statement date.
            pattern: Pattern from BillingCyclePatternAnalyzer.
            months_ahead: Number of cycles to project. Defaults to config.

        Returns:
            List of BillingCycleProjection, oldest first, length months_ahead.

        Raises:
            ValueError: If months_ahead is negative.
        """
        return list(self.iter_projections(last_known_cycle, pattern, months_ahead))

    def iter_projections(
        self,
        last_known_cycle: HistoricalCycle,
        pattern: BillingCyclePattern,
        months_ahead: int | None = None,
    ) -> Iterator[BillingCycleProjection]:
        """
        Lazy variant of project(). Arguments are validated on the call, not
        on the first next().

        Raises:
            ValueError: If months_ahead is negative.
        """
        if months_ahead is None:
            months_ahead = self.default_months_ahead
        if months_ahead < 0:
            raise ValueError(f"months_ahead must be >= 0, got {months_ahead}")

        return self._generate(last_known_cycle.statement_date, pattern, months_ahead)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    def _generate(
        self, current_statement_date, pattern: BillingCyclePattern, months_ahead: int
    ) -> Iterator[BillingCycleProjection]:
        for i in range(months_ahead):
            next_statement_date = self._next_statement_date(current_statement_date, pattern)

            yield BillingCycleProjection(
                cycle_start_date=current_statement_date + timedelta(days=1),
                cycle_end_date=next_statement_date,
                payment_due_date=next_statement_date + timedelta(days=pattern.due_date_offset),
                is_projected=True,
                confidence=self._decayed_confidence(pattern.confidence, i),
            )

            current_statement_date = next_statement_date

    @staticmethod
    def _next_statement_date(current, pattern: BillingCyclePattern):
        if pattern.statement_day_of_month is not None:
            return adjust_for_month_end(add_months(current, 1), pattern.statement_day_of_month)
        return current + timedelta(days=pattern.typical_cycle_length)

    def _decayed_confidence(self, pattern_confidence: float, index: int) -> float:
        return round(max(0.0, pattern_confidence * (1 - index * self.decay_per_cycle)), 4)


def project_future_cycles(
    last_known_cycle: HistoricalCycle,
    pattern: BillingCyclePattern,
    months_ahead: int = 6,
) -> List[BillingCycleProjection]:
    """Functional shortcut for CycleProjector().project()."""
    return CycleProjector().project(last_known_cycle, pattern, months_ahead)
