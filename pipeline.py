"""
pipeline.py
------------
Main orchestration layer. Wires together, per account:
    1. History preparation         →  HistoricalCycle values (most recent N)
    2. BillingCyclePatternAnalyzer →  BillingCyclePattern + quality
    3. CycleProjector              →  projected BillingCycleProjections
    4. Output serialization        →  pattern and projection DataFrames

The engine itself is pure; persisting the DataFrames is the caller's job.

Usage:
    from pipeline import BillingCyclePipeline

    pipeline = BillingCyclePipeline()
    projections_df = pipeline.run(history_df)
    patterns_df = pipeline.analyze_accounts(history_df)

    # Both at once, analyzing each account a single time
    patterns_df, projections_df = pipeline.process(history_df)
"""

import logging
from typing import Dict, List, Tuple

import pandas as pd

from config.config_loader import get_pipeline_config
from core.history import cycles_from_frame, prepare_history_frame
from core.models import BillingCycleProjection, HistoricalCycle, PatternAnalysisResult
from core.pattern_analyzer import BillingCyclePatternAnalyzer
from projection.cycle_projector import CycleProjector
from scoring.confidence_scorer import get_confidence_message

logger = logging.getLogger(__name__)

PATTERN_COLUMNS = [
    "account_id", "typical_cycle_length", "statement_day_of_month",
    "due_date_offset", "pattern_confidence", "quality", "cycle_count", "insights",
]

PROJECTION_COLUMNS = [
    "account_id", "cycle_start_date", "cycle_end_date", "payment_due_date",
    "is_projected", "confidence", "data_source", "confidence_message",
]


class BillingCyclePipeline:
    """
    End-to-end billing cycle analysis and projection for many accounts.

    Accounts are independent: each one is analyzed and projected from its
    own history only.
    """

    def __init__(self, months_ahead: int | None = None, history_limit: int | None = None):
        """
        Args:
            months_ahead: Cycles to project per account. Defaults to config.
            history_limit: Most recent cycles used per account. Defaults to config.
        """
        self.config = get_pipeline_config()
        self.analyzer = BillingCyclePatternAnalyzer()
        self.projector = CycleProjector()
        self.months_ahead = months_ahead if months_ahead is not None else self.projector.default_months_ahead
        self.history_limit = history_limit if history_limit is not None else self.config["history_limit"]

        if self.months_ahead < 0:
            raise ValueError(f"months_ahead must be >= 0, got {self.months_ahead}")
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {self.history_limit}")

        logger.info(
            f"Pipeline initialized. "
            f"Months ahead: {self.months_ahead}. History limit: {self.history_limit} cycles."
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(self, history: pd.DataFrame) -> pd.DataFrame:
        """
        Analyze every account and project its future cycles.

        Args:
            history: DataFrame with columns account_id, statement_date,
                due_date and optionally statement_balance.

        Returns:
            DataFrame of projected cycles, one row per (account, cycle).
        """
        return self.process(history)[1]

    def analyze_accounts(self, history: pd.DataFrame) -> pd.DataFrame:
        """Run only pattern analysis. One row per account."""
        return self._serialize_patterns(self._analyze(history))

    def process(self, history: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        Analyze once and return both outputs.

        Returns:
            Tuple of (patterns DataFrame, projections DataFrame).
        """
        logger.info(f"Pipeline starting. Input: {len(history):,} historical cycles.")

        results = self._analyze(history)
        logger.info(f"Stage 1 complete. Accounts analyzed: {len(results):,}.")

        projections = self._project(results)
        logger.info(f"Stage 2 complete. Projected cycles: {len(projections):,}.")

        patterns_df = self._serialize_patterns(results)
        projections_df = self._serialize_projections(projections)
        logger.info(f"Pipeline complete. Output rows: {len(projections_df):,}.")

        return patterns_df, projections_df

    # -------------------------------------------------------------------------
    # INTERNAL: ANALYSIS
    # -------------------------------------------------------------------------

    def _analyze(
        self, history: pd.DataFrame
    ) -> Dict[str, Tuple[List[HistoricalCycle], PatternAnalysisResult]]:
        """
        Groups history by account, keeps the most recent history_limit cycles
        and analyzes each group.
        """
        if "account_id" not in history.columns:
            raise ValueError("Missing required columns: ['account_id']")

        df = prepare_history_frame(history)

        missing_id = df["account_id"].isna()
        if missing_id.any():
            logger.warning(f"Dropping {int(missing_id.sum()):,} history rows with no account_id.")
            df = df[~missing_id]

        # The same statement can arrive from both bank sync and manual entry
        statement_day = df["statement_date"].dt.normalize()
        duplicated = pd.concat([df["account_id"], statement_day], axis=1).duplicated(keep="first")
        for row in df[duplicated].itertuples(index=False):
            logger.warning(
                f"Account {row.account_id}: dropping duplicate statement dated "
                f"{row.statement_date.date().isoformat()}."
            )
        df = df[~duplicated]

        results: Dict[str, Tuple[List[HistoricalCycle], PatternAnalysisResult]] = {}

        for account_id, group in df.groupby("account_id", sort=True):
            recent = group.sort_values("statement_date").tail(self.history_limit)
            cycles = cycles_from_frame(recent)
            analysis = self.analyzer.analyze(cycles)

            if analysis.quality == "low":
                logger.warning(
                    f"Account {account_id}: low quality pattern from {len(cycles)} cycle(s) "
                    f"(confidence {analysis.pattern.confidence:.2f})."
                )

            results[account_id] = (cycles, analysis)

        return results

    def _project(
        self, results: Dict[str, Tuple[List[HistoricalCycle], PatternAnalysisResult]]
    ) -> List[Tuple[str, BillingCycleProjection]]:
        """Projects every account forward from its most recent statement."""
        projections: List[Tuple[str, BillingCycleProjection]] = []
        for account_id, (cycles, analysis) in results.items():
            if not cycles:
                continue
            last_known = max(cycles, key=lambda c: c.statement_date)
            for projection in self.projector.project(last_known, analysis.pattern, self.months_ahead):
                projections.append((account_id, projection))
        return projections

    # -------------------------------------------------------------------------
    # INTERNAL: OUTPUT SERIALIZATION
    # -------------------------------------------------------------------------

    @staticmethod
    def _serialize_patterns(
        results: Dict[str, Tuple[List[HistoricalCycle], PatternAnalysisResult]]
    ) -> pd.DataFrame:
        rows = [
            {
                "account_id": account_id,
                "typical_cycle_length": analysis.pattern.typical_cycle_length,
                "statement_day_of_month": analysis.pattern.statement_day_of_month,
                "due_date_offset": analysis.pattern.due_date_offset,
                "pattern_confidence": analysis.pattern.confidence,
                "quality": analysis.quality,
                "cycle_count": len(cycles),
                "insights": " | ".join(analysis.insights),
            }
            for account_id, (cycles, analysis) in results.items()
        ]
        if not rows:
            return pd.DataFrame(columns=PATTERN_COLUMNS)
        return pd.DataFrame(rows, columns=PATTERN_COLUMNS)

    def _serialize_projections(
        self, projections: List[Tuple[str, BillingCycleProjection]]
    ) -> pd.DataFrame:
        """Flattens projections into the storage-ready schema."""
        if not projections:
            return pd.DataFrame(columns=PROJECTION_COLUMNS)

        data_source = self.config["projected_data_source"]
        rows = []
        for account_id, p in projections:
            rows.append({
                "account_id": account_id,
                "cycle_start_date": p.cycle_start_date.isoformat(),
                "cycle_end_date": p.cycle_end_date.isoformat(),
                "payment_due_date": p.payment_due_date.isoformat(),
                "is_projected": p.is_projected,
                "confidence": p.confidence,
                "data_source": data_source,
                "confidence_message": get_confidence_message(p.confidence),
            })

        df = pd.DataFrame(rows, columns=PROJECTION_COLUMNS)

        # Sort: cycle end date → account, the order a calendar renders them in
        df = df.sort_values(["cycle_end_date", "account_id"]).reset_index(drop=True)

        return df


def group_cycles_by_month(projections: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    Splits a projections DataFrame into {"YYYY-MM": rows} keyed by the month
    each cycle closes in.
    """
    if projections.empty:
        return {}
    month_keys = pd.to_datetime(projections["cycle_end_date"]).dt.strftime("%Y-%m")
    return {
        month: group.reset_index(drop=True)
        for month, group in projections.groupby(month_keys, sort=True)
    }
