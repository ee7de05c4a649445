"""
Preprocessing utilities for card classification.
Handles field normalization and the reference-table pair key.
"""

import re
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Dict


_WHITESPACE_RE = re.compile(r"\s+")

# Raw request keys -> normalized attribute names
CARD_FIELD_KEYS = {
    "memberId": "member_id",
    "group": "group",
    "bin": "bin",
    "pcn": "pcn",
}


@dataclass(frozen=True)
class NormalizedCardFields:
    """Canonical card fields used by both classification stages."""
    member_id: str = ""
    group: str = ""
    bin: str = ""
    pcn: str = ""

    @property
    def pair_key(self) -> str:
        return make_pair_key(self.bin, self.pcn)


def normalize_field(value: Any) -> str:
    """
    Normalize a raw card field for matching.

    Args:
        value: Raw field value (anything, including None)

    Returns:
        Uppercase text with every whitespace character removed, or "" for
        missing and non-string values
    """
    if not isinstance(value, str):
        return ""
    return _WHITESPACE_RE.sub("", value.upper())


def make_pair_key(bin_value: str, pcn_value: str) -> str:
    """Build the "BIN|PCN" key used by the pair tables."""
    return f"{bin_value}|{pcn_value}"


def normalize_card_fields(fields: Any) -> NormalizedCardFields:
    """
    Normalize a raw field map into NormalizedCardFields.

    Anything that is not a mapping is treated as an empty mapping, so a
    malformed request body still yields a usable (empty) card.
    """
    if not isinstance(fields, Mapping):
        fields = {}

    values: Dict[str, str] = {}
    for raw_key, attr in CARD_FIELD_KEYS.items():
        values[attr] = normalize_field(fields.get(raw_key))

    return NormalizedCardFields(**values)
