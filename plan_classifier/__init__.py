"""
Plan Classifier - Pharmacy Benefit Plan Type Detection.

Classifies a pharmacy benefit card as Medicare Part D, State Medicaid,
Commercial or Unknown from its member ID, group number, BIN and PCN.

Main Components:
    - patterns: Heuristic signal patterns and weights
    - config: Plan labels, thresholds and reference sources
    - classification: Normalization, deterministic and heuristic stages
    - reference: BIN/PCN reference tables, ingestion and refresh
    - batch: Table-at-a-time classification
"""

from typing import Any, Dict, Optional

# Classification components (imported before reference, which depends on
# classification.preprocess)
from .classification.engine import (
    ClassificationEngine,
    ClassificationResult,
)
from .classification.preprocess import (
    NormalizedCardFields,
    normalize_field,
    normalize_card_fields,
)
from .classification.deterministic import DeterministicClassifier
from .classification.heuristic import HeuristicClassifier

# Reference data
from .reference.store import ReferenceStore, ReferenceSnapshot
from .reference.refresh import (
    fetch_text,
    refresh_reference_data,
    start_background_refresh,
    load_cached_reference_data,
    RefreshReport,
)

# Configuration
from .config.classifier_config import (
    CLASSIFIER_CONFIG,
    SOURCE_CONFIG,
    MEDICARE_PART_D,
    STATE_MEDICAID,
    UNKNOWN_PLAN,
)

from .errors import ClassifierError, SourceFetchError


__version__ = "1.0.0"
__all__ = [
    # Classification
    "ClassificationEngine",
    "ClassificationResult",
    "NormalizedCardFields",
    "normalize_field",
    "normalize_card_fields",
    "DeterministicClassifier",
    "HeuristicClassifier",
    # Reference data
    "ReferenceStore",
    "ReferenceSnapshot",
    "fetch_text",
    "refresh_reference_data",
    "start_background_refresh",
    "load_cached_reference_data",
    "RefreshReport",
    # Configuration
    "CLASSIFIER_CONFIG",
    "SOURCE_CONFIG",
    "MEDICARE_PART_D",
    "STATE_MEDICAID",
    "UNKNOWN_PLAN",
    # Errors
    "ClassifierError",
    "SourceFetchError",
    # Main function
    "run_plan_classification",
]


def run_plan_classification(
    fields: Dict[str, Any],
    engine: Optional[ClassificationEngine] = None,
) -> Dict[str, Any]:
    """
    Main entry point for single-card classification.

    Args:
        fields: Raw card fields (memberId, group, bin, pcn)
        engine: Engine to use; a fresh engine with an empty reference store
            is created when omitted, so only the fixed commercial BINs and
            the heuristic signals apply

    Returns:
        Dictionary with plan and confidence

    Example:
        >>> run_plan_classification({"bin": "610502"})
        {'plan': 'Commercial', 'confidence': 0.9}
    """
    if engine is None:
        engine = ClassificationEngine()
    return engine.classify(fields).to_dict()
