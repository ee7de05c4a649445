"""
Generic Pattern Matching for Card Classification.

Provides reusable regex matching for the heuristic signal dictionaries.
"""

import re
from typing import Dict, List, Optional, Tuple


def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Compile regex pattern strings.

    Patterns are compiled with re.ASCII so that \\d and \\w only cover
    ASCII digits and word characters, as card numbers are printed.
    """
    return [re.compile(pattern, re.ASCII) for pattern in patterns]


def match_regex_patterns(
    text: str,
    patterns: List[re.Pattern]
) -> Optional[Tuple[str, float, str]]:
    """
    Match text against a list of compiled regex patterns.

    Args:
        text: Normalized text to match
        patterns: Compiled patterns, searched in order

    Returns:
        Tuple of (matched_pattern, confidence, match_method) or None

    Example:
        >>> match_regex_patterns("MEDDADV", compile_patterns([r"MEDD|ADV"]))
        ("MEDD|ADV", 1.0, "regex")
    """
    if not text:
        return None

    for pattern in patterns:
        if pattern.search(text):
            return (pattern.pattern, 1.0, "regex")

    return None


def compile_signal_dict(pattern_dict: Dict[str, Dict]) -> Dict[str, Dict[str, Dict]]:
    """
    Precompile every signal of a category pattern dictionary.

    Pattern dict format:
    {
        "category_name": {
            "signals": {
                "signal_name": {
                    "field": "pcn",
                    "regex_patterns": [r"PATTERN1", r"PATTERN2"],
                    "weight": 0.25,
                },
            },
            ...
        }
    }

    Returns:
        {category_name: {signal_name: {"field", "patterns", "weight"}}}
    """
    compiled = {}
    for category_name, pattern_info in pattern_dict.items():
        signals = {}
        for signal_name, signal in pattern_info.get("signals", {}).items():
            signals[signal_name] = {
                "field": signal["field"],
                "patterns": compile_patterns(signal.get("regex_patterns", [])),
                "weight": signal.get("weight", 0.0),
            }
        compiled[category_name] = signals
    return compiled


def pick_best_category(
    scores: Dict[str, float],
    order: List[str]
) -> Tuple[Optional[str], float]:
    """
    Pick the category with the strictly highest score.

    Categories are visited in ``order``; a later category only wins with a
    strictly greater score, so ties go to the earlier one.
    """
    best_category = None
    best_score = 0.0

    for category in order:
        score = scores.get(category, 0.0)
        if best_category is None or score > best_score:
            best_category = category
            best_score = score

    return best_category, best_score
