"""
Batch card classification.
Classifies tables of cards (CSV uploads, JSON lists) with a shared engine.
"""

import logging
from typing import Any, Dict, List

import pandas as pd

from .classification.engine import ClassificationEngine
from .classification.preprocess import CARD_FIELD_KEYS

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["plan", "confidence", "stage"]


def classify_records(engine: ClassificationEngine, records: List[Any]) -> List[Dict[str, Any]]:
    """
    Classify a list of raw card field maps.

    Non-mapping entries are classified like an empty card rather than
    rejected, matching single-card behaviour.
    """
    results = []
    for record in records:
        result = engine.classify(record)
        results.append({
            "plan": result.plan,
            "confidence": result.confidence,
            "stage": result.stage,
        })
    return results


def classify_dataframe(engine: ClassificationEngine, df: pd.DataFrame) -> pd.DataFrame:
    """
    Classify every row of a card DataFrame.

    Args:
        engine: Engine to classify with
        df: DataFrame with any of the columns memberId, group, bin, pcn

    Returns:
        Copy of ``df`` with plan, confidence and stage columns added
    """
    out = df.copy()
    card_columns = [col for col in CARD_FIELD_KEYS if col in out.columns]

    # Blank cells arrive as NaN; classify them as missing
    cards = out[card_columns].astype(object).where(out[card_columns].notna(), None)
    records = cards.to_dict(orient="records") if card_columns else [{}] * len(out)

    results = classify_records(engine, records)
    for column in RESULT_COLUMNS:
        out[column] = [r[column] for r in results]

    logger.info("Classified %d card(s)", len(out))
    return out


def read_cards_csv(buffer) -> pd.DataFrame:
    """Read an uploaded card CSV with every column kept as text."""
    return pd.read_csv(buffer, dtype=str, keep_default_na=False)


def summarize_results(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Summary statistics for a classified DataFrame.

    Returns:
        Dict with total, per-plan counts, per-stage counts and the average
        confidence
    """
    if df.empty:
        return {
            "total": 0,
            "plans": {},
            "stages": {},
            "average_confidence": 0.0,
        }

    return {
        "total": int(len(df)),
        "plans": {str(k): int(v) for k, v in df["plan"].value_counts().items()},
        "stages": {str(k): int(v) for k, v in df["stage"].value_counts().items()},
        "average_confidence": round(float(df["confidence"].mean()), 4),
    }
