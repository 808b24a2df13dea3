"""
main.py
--------
Entry point for the Billing Cycle Engine.

Reads a CSV of historical billing cycles (one row per observed statement),
detects each account's billing pattern, projects future cycles and writes
both to the outputs/ folder.

Input columns: account_id, statement_date, due_date[, statement_balance]

Usage (from the project root):
    python main.py --input path/to/billing_history.csv

    # With optional arguments:
    python main.py --input history.csv --months-ahead 12
    python main.py --input history.csv --history-limit 6 --output-dir out/
"""

import sys
import os
import argparse
import logging
import pandas as pd
from datetime import datetime

# Ensure project root is on path (for runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from pipeline import BillingCyclePipeline


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Billing Cycle Engine: detect billing patterns and project future cycles."
    )
    parser.add_argument(
        "--input", type=str, required=True,
        help="Path to the historical billing cycles CSV."
    )
    parser.add_argument(
        "--months-ahead", type=int, default=None,
        help="Number of future cycles to project per account. Defaults to config value (6)."
    )
    parser.add_argument(
        "--history-limit", type=int, default=None,
        help="Most recent cycles used per account. Defaults to config value (12)."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, "outputs")
    os.makedirs(output_dir, exist_ok=True)

    # --- Load history ---
    logger.info(f"Loading billing history from: {args.input}")
    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    history = pd.read_csv(args.input)
    if "account_id" in history.columns:
        logger.info(f"Loaded {len(history):,} cycles, {history['account_id'].nunique():,} accounts.")

    # --- Run pipeline ---
    try:
        pipeline = BillingCyclePipeline(
            months_ahead=args.months_ahead, history_limit=args.history_limit
        )
        patterns, projections = pipeline.process(history)
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1

    # --- Output ---
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    patterns_path = os.path.join(output_dir, f"patterns_{timestamp}.csv")
    projections_path = os.path.join(output_dir, f"projections_{timestamp}.csv")
    patterns.to_csv(patterns_path, index=False)
    projections.to_csv(projections_path, index=False)
    logger.info(f"Patterns saved to: {patterns_path}")
    logger.info(f"Projections saved to: {projections_path}")

    _print_summary(patterns)
    return 0


def _print_summary(df: pd.DataFrame):
    """Prints a clean summary table to the console."""
    if df.empty:
        print("\n  No accounts to display.\n")
        return

    print("\n" + "=" * 80)
    print("  BILLING CYCLE PATTERN SUMMARY")
    print("=" * 80)

    print("\n  Patterns by Account:")
    print("  " + "-" * 60)
    for _, row in df.iterrows():
        day = row["statement_day_of_month"]
        day_label = f"day {int(day)}" if pd.notna(day) else "varies"
        print(
            f"    {str(row['account_id']):20s}  {int(row['typical_cycle_length']):>3}d cycle  "
            f"closes {day_label:8s}  due +{int(row['due_date_offset'])}d  "
            f"({row['quality']}, {row['pattern_confidence']:.2f})"
        )

    print(f"\n  Quality Mix:")
    print("  " + "-" * 60)
    for quality in ["high", "medium", "low"]:
        count = (df["quality"] == quality).sum()
        pct = (count / len(df) * 100) if len(df) > 0 else 0
        print(f"    {quality:10s}  {count:>5,}  ({pct:.1f}%)")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    sys.exit(main())
