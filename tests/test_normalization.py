"""
Test card field normalization.
Normalization must be total (never raises) and idempotent.
"""

import unittest

from plan_classifier.classification.preprocess import (
    NormalizedCardFields,
    normalize_field,
    normalize_card_fields,
    make_pair_key,
)


class TestNormalizeField(unittest.TestCase):
    """Test single field normalization."""

    def test_uppercases_and_strips_all_whitespace(self):
        self.assertEqual(normalize_field("  medd adv "), "MEDDADV")
        self.assertEqual(normalize_field("rx\tmapd\n01"), "RXMAPD01")

    def test_missing_and_non_string_values_become_empty(self):
        for value in (None, "", 610502, 3.5, ["BIN"], {"a": 1}, True):
            self.assertEqual(normalize_field(value), "", f"value={value!r}")

    def test_unicode_whitespace_removed(self):
        self.assertEqual(normalize_field("004\u00a0336\u2003"), "004336")

    def test_idempotent(self):
        samples = [
            "", " ", "abc", "1ab2c34de56", " 610 502 ", "Straße", "MEDD ADV",
            "ﬁle", "x\r\ny",
        ]
        for sample in samples:
            once = normalize_field(sample)
            self.assertEqual(normalize_field(once), once, f"sample={sample!r}")


class TestNormalizeCardFields(unittest.TestCase):
    """Test raw field map normalization."""

    def test_maps_request_keys(self):
        card = normalize_card_fields({
            "memberId": "abc 123456",
            "group": "partd",
            "bin": " 004336",
            "pcn": "meddadv ",
        })
        self.assertEqual(card, NormalizedCardFields(
            member_id="ABC123456", group="PARTD", bin="004336", pcn="MEDDADV"
        ))
        self.assertEqual(card.pair_key, "004336|MEDDADV")

    def test_missing_keys_default_to_empty(self):
        card = normalize_card_fields({"bin": "610502"})
        self.assertEqual(card.member_id, "")
        self.assertEqual(card.group, "")
        self.assertEqual(card.pcn, "")
        self.assertEqual(card.bin, "610502")

    def test_non_mapping_input_is_empty_card(self):
        for value in (None, "bin=610502", 42, ["610502"]):
            self.assertEqual(normalize_card_fields(value), NormalizedCardFields())

    def test_pair_key(self):
        self.assertEqual(make_pair_key("004336", "MEDDADV"), "004336|MEDDADV")
        self.assertEqual(make_pair_key("", ""), "|")


if __name__ == "__main__":
    unittest.main()
