"""
Deterministic stage: exact reference-table lookups.

Exact BIN+PCN pairs are authoritative, bare BIN membership is an
issuer-level signal, and the fixed commercial BINs are checked last.
"""

from typing import Dict, List, Optional, Tuple

from ..config.classifier_config import CLASSIFIER_CONFIG
from .preprocess import make_pair_key

# Lookup order: (rule name, snapshot attribute, key kind)
DETERMINISTIC_RULES: List[Tuple[str, str, str]] = [
    ("medicare_pair", "medicare_pairs", "pair"),
    ("medicaid_pair", "medicaid_pairs", "pair"),
    ("medicare_bin", "medicare_bin", "bin"),
    ("medicaid_bin", "medicaid_bin", "bin"),
    ("commercial_bin", "commercial_bin", "bin"),
]


class DeterministicClassifier:
    """Looks up BIN/PCN in the reference snapshot, first hit wins."""

    def __init__(self, outcomes: Optional[Dict[str, Dict]] = None):
        self.outcomes = outcomes or CLASSIFIER_CONFIG["deterministic"]

    def classify(self, snapshot, bin_value: str, pcn_value: str) -> Tuple[Optional[str], float]:
        """
        Classify normalized BIN/PCN against ``snapshot``.

        Returns:
            (plan, confidence), or (None, 0.0) when nothing matches
        """
        keys = {
            "pair": make_pair_key(bin_value, pcn_value),
            "bin": bin_value,
        }

        for rule_name, table_attr, key_kind in DETERMINISTIC_RULES:
            if keys[key_kind] in getattr(snapshot, table_attr):
                outcome = self.outcomes[rule_name]
                return outcome["plan"], outcome["confidence"]

        return None, 0.0
