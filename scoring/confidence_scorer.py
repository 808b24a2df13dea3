"""
confidence_scorer.py
---------------------
Turns a pattern confidence into the number (and sentence) a user sees.

Two independent discounts are applied to the pattern confidence:

    1. Provenance: data pulled directly from the bank is trusted more than
       data inferred from a pattern, which is trusted more than manual entry.
    2. Staleness: after a grace period the score decays linearly until it
       reaches a floor (half the undecayed score after 30 days by default).

Factors, grace period, decay window, floor and message thresholds all come
from config.yaml.
"""

from config.config_loader import get_confidence_messages, get_cycle_confidence_config
from core.models import ConfidenceScore


def calculate_cycle_confidence(
    data_source: str, data_age_hours: float, pattern_confidence: float
) -> float:
    """
    Combine pattern confidence, provenance and staleness into one score.

    Args:
        data_source: "plaid" | "inferred" | "manual".
        data_age_hours: Hours since the data was last refreshed.
        pattern_confidence: Confidence of the underlying pattern, 0.0–1.0.

    Returns:
        Score clamped to [0, 1].

    Raises:
        ValueError: On an unknown data_source, a negative age or a pattern
            confidence outside [0, 1].
    """
    config = get_cycle_confidence_config()
    factors = config["source_factors"]

    if data_source not in factors:
        raise ValueError(
            f"Unknown data source '{data_source}'. Available: {list(factors.keys())}"
        )
    if data_age_hours < 0:
        raise ValueError(f"data_age_hours must be >= 0, got {data_age_hours}")
    if not 0.0 <= pattern_confidence <= 1.0:
        raise ValueError(f"pattern_confidence must be within [0, 1], got {pattern_confidence}")

    confidence = pattern_confidence * factors[data_source]

    grace = config["staleness_grace_hours"]
    if data_age_hours > grace:
        decay = 1 - (data_age_hours - grace) / config["staleness_decay_hours"]
        confidence *= max(config["staleness_floor"], decay)

    return max(0.0, min(1.0, confidence))


def get_confidence_message(confidence: float) -> str:
    """User-facing label for a confidence score."""
    table = get_confidence_messages()
    for entry in table["thresholds"]:
        if confidence >= entry["min_confidence"]:
            return entry["message"]
    return table["fallback"]


def score_cycle_confidence(
    data_source: str, data_age_hours: float, pattern_confidence: float
) -> ConfidenceScore:
    """calculate_cycle_confidence() plus the message and the inputs used."""
    overall = calculate_cycle_confidence(data_source, data_age_hours, pattern_confidence)
    return ConfidenceScore(
        overall=overall,
        data_source=data_source,
        data_age_hours=data_age_hours,
        pattern_confidence=pattern_confidence,
        display_message=get_confidence_message(overall),
    )
