"""
pattern_analyzer.py
--------------------
Billing cycle pattern detection.

Answers one question for a single credit card account:

    "Given the statements we have seen, what is the recurring schedule,
     and how much should we trust it?"

Output: a PatternAnalysisResult carrying a BillingCyclePattern, a quality
tier and human-readable insights. The insights are for display only;
nothing downstream reads them.

Design decisions:
    - Fewer than min_cycles observations is not an error. The analyzer
      returns a conservative default pattern with low confidence so the UI
      can always show something.
    - Statement-day consistency tolerates month-end clipping: days 28–31
      for a "closes on the 31st" card are the same schedule.
    - Confidence is additive (base + sample bonus + consistency bonuses),
      so more and more regular data never scores lower.
    - All thresholds and weights are read from config.yaml.
"""

import logging
from typing import List, Sequence

from config.config_loader import get_pattern_analysis_config, get_quality_tiers
from core import statistics
from core.models import BillingCyclePattern, HistoricalCycle, PatternAnalysisResult

logger = logging.getLogger(__name__)

INSUFFICIENT_HISTORY_INSIGHT = "Insufficient historical data. Need at least 2 billing cycles."


class BillingCyclePatternAnalyzer:
    """
    Infers a recurring billing schedule from historical cycles.

    Usage:
        analyzer = BillingCyclePatternAnalyzer()
        result = analyzer.analyze(historical_cycles)
    """

    def __init__(self):
        self.config = get_pattern_analysis_config()
        self.min_cycles = self.config["min_cycles"]
        self.consistency = self.config["consistency"]
        self.weights = self.config["confidence_weights"]
        self.quality_tiers = get_quality_tiers()

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def analyze(self, historical_cycles: Sequence[HistoricalCycle]) -> PatternAnalysisResult:
        """
        Analyze historical billing cycles to detect a pattern.

        Args:
            historical_cycles: Observed cycles in any order. Not modified.

        Returns:
            PatternAnalysisResult with pattern, quality and insights.
        """
        if len(historical_cycles) < self.min_cycles:
            logger.debug(
                f"Only {len(historical_cycles)} cycle(s) supplied. Using default pattern."
            )
            return PatternAnalysisResult(
                pattern=self.default_pattern(),
                quality="low",
                insights=(INSUFFICIENT_HISTORY_INSIGHT,),
            )

        cycles = sorted(historical_cycles, key=lambda c: c.statement_date)
        insights: List[str] = []

        # --- Cycle length ---
        cycle_lengths = [
            (cycles[i].statement_date - cycles[i - 1].statement_date).days
            for i in range(1, len(cycles))
        ]
        typical_cycle_length = self._typical_cycle_length(cycle_lengths)
        is_consistent_length = (
            statistics.variance(cycle_lengths) < self.consistency["max_cycle_length_variance"]
        )

        if is_consistent_length:
            insights.append(f"Consistent billing cycle of {typical_cycle_length} days")
        else:
            insights.append(f"Variable billing cycle ({min(cycle_lengths)}-{max(cycle_lengths)} days)")

        # --- Statement day of month ---
        statement_days = [c.statement_date.day for c in cycles]
        most_common_day = statistics.mode(statement_days)
        is_consistent_day = self._is_consistent_statement_day(statement_days)
        statement_day_of_month = most_common_day if is_consistent_day else None

        if statement_day_of_month is not None:
            insights.append(f"Statements typically close on day {statement_day_of_month} of the month")
        else:
            insights.append("Statement dates vary by month")

        # --- Due date offset ---
        due_date_offsets = [(c.due_date - c.statement_date).days for c in cycles]
        due_date_offset = statistics.round_half_up(statistics.median(due_date_offsets))
        is_consistent_offset = (
            statistics.variance(due_date_offsets) < self.consistency["max_due_offset_variance"]
        )

        if is_consistent_offset:
            insights.append(f"Payment typically due {due_date_offset} days after statement")
        else:
            insights.append("Due date offset varies between cycles")

        # --- Confidence & quality ---
        confidence = self._compute_confidence(
            len(historical_cycles), is_consistent_length, is_consistent_day, is_consistent_offset
        )
        quality = self._assign_quality(confidence, len(historical_cycles))

        return PatternAnalysisResult(
            pattern=BillingCyclePattern(
                typical_cycle_length=typical_cycle_length,
                statement_day_of_month=statement_day_of_month,
                due_date_offset=due_date_offset,
                confidence=confidence,
            ),
            quality=quality,
            insights=tuple(insights),
        )

    def default_pattern(self) -> BillingCyclePattern:
        """The fallback pattern used when history is too short."""
        d = self.config["default_pattern"]
        return BillingCyclePattern(
            typical_cycle_length=d["typical_cycle_length"],
            statement_day_of_month=d["statement_day_of_month"],
            due_date_offset=d["due_date_offset"],
            confidence=d["confidence"],
        )

    # -------------------------------------------------------------------------
    # INTERNAL: CONSISTENCY CHECKS
    # -------------------------------------------------------------------------

    @staticmethod
    def _typical_cycle_length(cycle_lengths: List[int]) -> int:
        """
        Mode of the cycle lengths. When every length is distinct there is no
        meaningful mode, so the median (rounded half up) is used instead.
        """
        if len(cycle_lengths) > 1 and not statistics.has_repeats(cycle_lengths):
            return statistics.round_half_up(statistics.median(cycle_lengths))
        return int(statistics.mode(cycle_lengths))

    def _is_consistent_statement_day(self, statement_days: List[int]) -> bool:
        """
        Identical days are consistent. Otherwise the spread must be small and
        reach the month end, i.e. be explainable by short months clipping a
        high target day (31 -> 30 -> 28).
        """
        if len(set(statement_days)) == 1:
            return True

        spread = max(statement_days) - min(statement_days)
        return (
            spread <= self.consistency["max_statement_day_spread"]
            and max(statement_days) >= self.consistency["month_end_min_day"]
        )

    # -------------------------------------------------------------------------
    # INTERNAL: SCORING
    # -------------------------------------------------------------------------

    def _compute_confidence(
        self,
        cycle_count: int,
        is_consistent_length: bool,
        is_consistent_day: bool,
        is_consistent_offset: bool,
    ) -> float:
        """
        Additive confidence score:
            - base
            - sample bonus: many_cycles_bonus at >= many_cycles_min,
              else some_cycles_bonus at >= some_cycles_min
            - one bonus per consistent dimension

        Rounded to 4 decimals so float accumulation (0.5 + 0.2 + 0.1) cannot
        push a score under a tier boundary.
        """
        w = self.weights
        confidence = w["base"]

        if cycle_count >= w["many_cycles_min"]:
            confidence += w["many_cycles_bonus"]
        elif cycle_count >= w["some_cycles_min"]:
            confidence += w["some_cycles_bonus"]

        if is_consistent_length:
            confidence += w["consistent_length_bonus"]
        if is_consistent_day:
            confidence += w["consistent_day_bonus"]
        if is_consistent_offset:
            confidence += w["consistent_offset_bonus"]

        return round(max(0.0, min(confidence, 1.0)), 4)

    def _assign_quality(self, confidence: float, cycle_count: int) -> str:
        """Maps confidence + sample count to the first tier whose minimums are met."""
        for tier_name, bounds in self.quality_tiers.items():
            if confidence >= bounds["min_confidence"] and cycle_count >= bounds["min_cycles"]:
                return tier_name
        return "low"


def analyze_billing_cycle_pattern(historical_cycles: Sequence[HistoricalCycle]) -> PatternAnalysisResult:
    """Functional shortcut for BillingCyclePatternAnalyzer().analyze()."""
    return BillingCyclePatternAnalyzer().analyze(historical_cycles)
