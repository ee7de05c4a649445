"""
Classifier configuration for pharmacy benefit plan detection.
Contains plan labels, stage confidences, thresholds and reference sources.
"""

import os

from ..patterns.card_patterns import MEDICARE, MEDICAID, COMMERCIAL

# Reference source identifiers
MEDICARE_PART_D = "medicare_part_d"
STATE_MEDICAID = "state_medicaid"

UNKNOWN_PLAN = "Unknown – manual review"

# Classification Configuration
CLASSIFIER_CONFIG = {
    # Deterministic stage, evaluated top to bottom, first hit wins
    "deterministic": {
        "medicare_pair": {"plan": "Medicare Part D / MA-PD", "confidence": 0.99},
        "medicaid_pair": {"plan": "State Medicaid", "confidence": 0.99},
        "medicare_bin": {"plan": "Likely Medicare Part D", "confidence": 0.90},
        "medicaid_bin": {"plan": "Likely Medicaid", "confidence": 0.90},
        "commercial_bin": {"plan": "Commercial", "confidence": 0.90},
    },

    "heuristic": {
        # Minimum winning score to report a plan (inclusive)
        "min_score": 0.6,
        # Equal scores resolve to whichever category comes first here
        "tie_break_order": [MEDICARE, MEDICAID, COMMERCIAL],
        "score_precision": 4,
    },

    # Known commercial PBM BINs, not sourced from any reference file
    "commercial_bins": ["610502", "020099", "003858", "600428"],

    "unknown_plan": UNKNOWN_PLAN,
}

# Reference data sources
SOURCE_CONFIG = {
    "sources": {
        MEDICARE_PART_D: {
            "url": os.environ.get(
                "PLAN_CLASSIFIER_PARTD_URL",
                "https://download.cms.gov/data-center/partd/cms_partd_binpcn_crosswalk_latest.csv",
            ),
            "cache_file": "partd.csv",
            "description": "CMS Part D BIN/PCN crosswalk",
        },
        STATE_MEDICAID: {
            "url": os.environ.get(
                "PLAN_CLASSIFIER_MEDICAID_URL",
                "https://raw.githubusercontent.com/your-org/data/master/state_medicaid_binpcn_current.csv",
            ),
            "cache_file": "medicaid.csv",
            "description": "State Medicaid BIN/PCN master list",
        },
    },
    "data_dir": os.environ.get(
        "PLAN_CLASSIFIER_DATA_DIR",
        os.path.join(os.getcwd(), "data"),
    ),
    "fetch_timeout": float(os.environ.get("PLAN_CLASSIFIER_FETCH_TIMEOUT", "30")),
}
