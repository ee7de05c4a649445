"""
Configuration module for the Plan Classifier.

This module contains all configuration dictionaries for classification and
reference data sources.
"""

from .classifier_config import (
    CLASSIFIER_CONFIG,
    SOURCE_CONFIG,
    MEDICARE_PART_D,
    STATE_MEDICAID,
    UNKNOWN_PLAN,
)

__all__ = [
    "CLASSIFIER_CONFIG",
    "SOURCE_CONFIG",
    "MEDICARE_PART_D",
    "STATE_MEDICAID",
    "UNKNOWN_PLAN",
]
