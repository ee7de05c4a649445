"""
Card Pattern Definitions for the Plan Classifier.

Contains the regex signals and weights used by the heuristic stage for:
- Medicare Part D (PCN, group, MBI-shaped member IDs)
- State Medicaid (PCN, numeric member IDs)
- Commercial (alpha-prefix member IDs)
"""

from .card_patterns import (
    CARD_PATTERNS,
    PLAN_CATEGORIES,
    MEDICARE,
    MEDICAID,
    COMMERCIAL,
)

__all__ = [
    "CARD_PATTERNS",
    "PLAN_CATEGORIES",
    "MEDICARE",
    "MEDICAID",
    "COMMERCIAL",
]
