"""
Classification Module for the Plan Classifier.

Orchestrates card classification through:
- Preprocessing (field normalization)
- Deterministic lookups (BIN/PCN reference tables)
- Heuristic scoring (regex signals and BIN membership)
"""

from .preprocess import (
    NormalizedCardFields,
    normalize_field,
    normalize_card_fields,
    make_pair_key,
)
from .pattern_matching import (
    compile_patterns,
    match_regex_patterns,
    pick_best_category,
)
from .deterministic import DeterministicClassifier
from .heuristic import HeuristicClassifier
from .engine import (
    ClassificationEngine,
    ClassificationResult,
    STAGE_DETERMINISTIC,
    STAGE_HEURISTIC,
    STAGE_FALLBACK,
)

__all__ = [
    # Engine
    "ClassificationEngine",
    "ClassificationResult",
    "STAGE_DETERMINISTIC",
    "STAGE_HEURISTIC",
    "STAGE_FALLBACK",
    # Stages
    "DeterministicClassifier",
    "HeuristicClassifier",
    # Preprocessing utilities
    "NormalizedCardFields",
    "normalize_field",
    "normalize_card_fields",
    "make_pair_key",
    # Pattern matching utilities
    "compile_patterns",
    "match_regex_patterns",
    "pick_best_category",
]
