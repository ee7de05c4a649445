"""
Card signal patterns for plan type classification.
Patterns for US pharmacy benefit cards (member ID, group, BIN, PCN).

Each category lists the heuristic signals that add to its score. A signal
contributes its weight at most once, however many of its patterns match.
All patterns run against normalized (uppercase, whitespace-free) text.
"""

# Category keys in default tie-break order
MEDICARE = "Medicare"
MEDICAID = "Medicaid"
COMMERCIAL = "Commercial"

PLAN_CATEGORIES = [MEDICARE, MEDICAID, COMMERCIAL]

# Fields a signal can inspect, plus the reference-table signal
FIELD_PCN = "pcn"
FIELD_GROUP = "group"
FIELD_MEMBER_ID = "member_id"

CARD_PATTERNS = {
    MEDICARE: {
        "signals": {
            "pcn": {
                "field": FIELD_PCN,
                "regex_patterns": [r"MEDD|ADV|MAPD|MSP"],
                "weight": 0.25,
                "description": "Part D / Medicare Advantage PCN",
            },
            "group": {
                "field": FIELD_GROUP,
                "regex_patterns": [r"PARTD|RXMAPD"],
                "weight": 0.15,
                "description": "Part D group number",
            },
            "member_id": {
                "field": FIELD_MEMBER_ID,
                "regex_patterns": [
                    # CMS MBI: 11 chars, positions 3 and 6 may be a letter or digit
                    r"^\d[A-Z][A-Z0-9]\d[A-Z][A-Z0-9]\d[A-Z]{2}\d{2}$",
                    # Legacy short form still printed on older cards
                    r"^\d[A-Z]\d[A-Z]\d\d[A-Z]{2}\d{2}$",
                ],
                "weight": 0.35,
                "description": "Medicare Beneficiary Identifier shape",
            },
        },
        "bin_weight": 0.25,
        "label": "Likely Medicare Part D",
    },

    MEDICAID: {
        "signals": {
            "pcn": {
                "field": FIELD_PCN,
                "regex_patterns": [r"MCD|MEDICAID"],
                "weight": 0.25,
                "description": "Medicaid PCN",
            },
            "member_id": {
                "field": FIELD_MEMBER_ID,
                "regex_patterns": [r"^\d{9,12}$"],
                "weight": 0.35,
                "description": "All-numeric state Medicaid ID",
            },
        },
        "bin_weight": 0.25,
        "label": "Likely Medicaid",
    },

    COMMERCIAL: {
        "signals": {
            "member_id": {
                "field": FIELD_MEMBER_ID,
                "regex_patterns": [r"^[A-Z]{3}\w{6,14}$"],
                "weight": 0.35,
                "description": "Alpha prefix followed by subscriber number",
            },
        },
        "bin_weight": 0.25,
        "label": "Commercial",
    },
}
