"""
Plan Classification Engine.
Classifies pharmacy benefit cards into Medicare Part D, State Medicaid,
Commercial or Unknown.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..config.classifier_config import CLASSIFIER_CONFIG
from ..reference.store import ReferenceStore
from .deterministic import DeterministicClassifier
from .heuristic import HeuristicClassifier
from .preprocess import normalize_card_fields

logger = logging.getLogger(__name__)

STAGE_DETERMINISTIC = "deterministic"
STAGE_HEURISTIC = "heuristic"
STAGE_FALLBACK = "fallback"


@dataclass
class ClassificationResult:
    """Result of card classification."""
    plan: str
    confidence: float
    stage: str = STAGE_FALLBACK  # 'deterministic', 'heuristic', 'fallback'
    scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: plan and confidence only."""
        return {"plan": self.plan, "confidence": self.confidence}


class ClassificationEngine:
    """Runs the deterministic stage, then the heuristic stage, then falls back."""

    def __init__(
        self,
        store: Optional[ReferenceStore] = None,
        deterministic: Optional[DeterministicClassifier] = None,
        heuristic: Optional[HeuristicClassifier] = None,
    ):
        self.store = store if store is not None else ReferenceStore()
        self.deterministic = deterministic or DeterministicClassifier()
        self.heuristic = heuristic or HeuristicClassifier()
        self.unknown_plan = CLASSIFIER_CONFIG["unknown_plan"]

    def classify(self, fields: Any) -> ClassificationResult:
        """
        Classify a raw card field map.

        Args:
            fields: Mapping with optional memberId, group, bin and pcn.
                Missing keys, non-string values and non-mapping input all
                normalize to empty strings.

        Returns:
            ClassificationResult; "Unknown – manual review" with confidence
            0 when neither stage matches
        """
        card = normalize_card_fields(fields)
        snapshot = self.store.snapshot

        plan, confidence = self.deterministic.classify(snapshot, card.bin, card.pcn)
        if plan:
            return ClassificationResult(plan, confidence, STAGE_DETERMINISTIC)

        plan, confidence, scores = self.heuristic.classify_with_scores(snapshot, card)
        if plan:
            return ClassificationResult(plan, confidence, STAGE_HEURISTIC, scores)

        logger.debug("No plan match for BIN=%r PCN=%r", card.bin, card.pcn)
        return ClassificationResult(self.unknown_plan, 0.0, STAGE_FALLBACK, scores)

    def ingest(self, source_id: str, raw_text: str) -> int:
        """Replace one reference source's tables. See ReferenceStore.ingest."""
        return self.store.ingest(source_id, raw_text)

    def health(self) -> bool:
        """True once any reference data has been loaded."""
        return self.store.health()
