"""
Heuristic stage: weighted pattern scoring.

Scores Medicare, Medicaid and Commercial from independent card signals
and reports the best category when it clears the threshold.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..config.classifier_config import CLASSIFIER_CONFIG
from ..patterns.card_patterns import CARD_PATTERNS, MEDICARE, MEDICAID, COMMERCIAL
from .pattern_matching import compile_signal_dict, match_regex_patterns, pick_best_category
from .preprocess import NormalizedCardFields

logger = logging.getLogger(__name__)

# Category -> snapshot BIN table that adds bin_weight
CATEGORY_BIN_TABLES = {
    MEDICARE: "medicare_bin",
    MEDICAID: "medicaid_bin",
    COMMERCIAL: "commercial_bin",
}


class HeuristicClassifier:
    """Pattern-based plan scoring."""

    def __init__(
        self,
        pattern_dict: Optional[Dict[str, Dict]] = None,
        min_score: Optional[float] = None,
        tie_break_order: Optional[List[str]] = None,
    ):
        """
        Initialize the heuristic classifier.

        Args:
            pattern_dict: Category signal definitions (default CARD_PATTERNS)
            min_score: Inclusive threshold for reporting a plan
            tie_break_order: Category order used to resolve equal scores
        """
        config = CLASSIFIER_CONFIG["heuristic"]
        self.pattern_dict = pattern_dict or CARD_PATTERNS
        self.min_score = config["min_score"] if min_score is None else min_score
        self.tie_break_order = list(tie_break_order or config["tie_break_order"])
        self.precision = config["score_precision"]

        self.signals = compile_signal_dict(self.pattern_dict)
        self.labels = {name: info["label"] for name, info in self.pattern_dict.items()}

    def score(self, snapshot, card: NormalizedCardFields) -> Dict[str, float]:
        """
        Accumulate a score per category.

        Each signal adds its weight once if any of its patterns match; the
        category's bin_weight is added when the BIN is in its table.
        """
        field_values = {
            "member_id": card.member_id,
            "group": card.group,
            "pcn": card.pcn,
            "bin": card.bin,
        }

        scores = {}
        for category, signals in self.signals.items():
            total = 0.0
            for signal in signals.values():
                if match_regex_patterns(field_values[signal["field"]], signal["patterns"]):
                    total += signal["weight"]

            table_attr = CATEGORY_BIN_TABLES.get(category)
            if table_attr and card.bin in getattr(snapshot, table_attr):
                total += self.pattern_dict[category].get("bin_weight", 0.0)

            scores[category] = round(total, self.precision)

        return scores

    def classify(self, snapshot, card: NormalizedCardFields) -> Tuple[Optional[str], float]:
        """
        Returns:
            (label, score) for the best category at or above min_score,
            otherwise (None, 0.0)
        """
        plan, score, _ = self.classify_with_scores(snapshot, card)
        return plan, score

    def classify_with_scores(
        self,
        snapshot,
        card: NormalizedCardFields
    ) -> Tuple[Optional[str], float, Dict[str, float]]:
        """Same as classify, also returning the per-category scores."""
        scores = self.score(snapshot, card)
        category, best_score = pick_best_category(scores, self.tie_break_order)

        if category is not None and best_score >= self.min_score:
            return self.labels[category], best_score, scores

        logger.debug("Heuristic scores below threshold: %s", scores)
        return None, 0.0, scores
