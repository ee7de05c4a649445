"""
Test BIN/PCN reference CSV ingestion and the reference store.
"""

import unittest

from plan_classifier.config.classifier_config import MEDICARE_PART_D, STATE_MEDICAID
from plan_classifier.errors import SourceFetchError
from plan_classifier.reference.csv_ingest import parse_reference_csv
from plan_classifier.reference.store import ReferenceStore


PARTD_CSV = """BIN,PCN,PLAN_NAME
004336,MEDDADV,Example Part D
610014, medd ,Example PDP
015581,MAPD01,Example MA-PD
"""

MEDICAID_CSV = """BIN,PCN,STATE
610084,DRTXPROD,TX
004740,MCDNY,NY
"""


class TestParseReferenceCsv(unittest.TestCase):
    """Test CSV parsing into pair and BIN sets."""

    def parse(self, text):
        pairs, bins = set(), set()
        parse_reference_csv(text, pairs, bins)
        return pairs, bins

    def test_builds_pairs_and_bins(self):
        pairs, bins = self.parse(PARTD_CSV)
        self.assertEqual(pairs, {"004336|MEDDADV", "610014|MEDD", "015581|MAPD01"})
        self.assertEqual(bins, {"004336", "610014", "015581"})

    def test_leading_zeros_preserved(self):
        pairs, bins = self.parse("BIN,PCN\n000123,ABC\n")
        self.assertIn("000123", bins)
        self.assertIn("000123|ABC", pairs)

    def test_rows_missing_bin_or_pcn_dropped(self):
        text = "BIN,PCN\n004336,MEDDADV\n,NOBIN\n999999,\n   ,   \n888888\n"
        pairs, bins = self.parse(text)
        self.assertEqual(pairs, {"004336|MEDDADV"})
        self.assertEqual(bins, {"004336"})

    def test_malformed_rows_do_not_fail_parse(self):
        text = "BIN,PCN\n004336,MEDDADV\n123456,X,Y,Z\n610014,MEDD\n"
        pairs, bins = self.parse(text)
        self.assertIn("004336|MEDDADV", pairs)
        self.assertIn("610014|MEDD", pairs)

    def test_unbalanced_quote_drops_only_that_row(self):
        text = 'BIN,PCN\n004336,MEDDADV\n"610014,MEDD\n015581,MAPD01\n'
        pairs, bins = self.parse(text)
        self.assertIn("004336|MEDDADV", pairs)
        self.assertIn("015581|MAPD01", pairs)
        self.assertFalse(any('"' in key for key in pairs | bins))

    def test_quoted_fields_still_parsed(self):
        pairs, _ = self.parse('"BIN","PCN","PLAN_NAME"\n"004336","MEDDADV","Plan, Inc."\n')
        self.assertEqual(pairs, {"004336|MEDDADV"})

    def test_colliding_header_names_keep_first_column(self):
        pairs, bins = self.parse("BIN,bin,PCN\n004336,999999,MEDDADV\n")
        self.assertEqual(pairs, {"004336|MEDDADV"})
        self.assertEqual(bins, {"004336"})

    def test_header_names_are_case_insensitive(self):
        pairs, _ = self.parse(" bin , pcn \n004336,MEDDADV\n")
        self.assertEqual(pairs, {"004336|MEDDADV"})

    def test_byte_order_mark_in_header(self):
        pairs, _ = self.parse("\ufeffBIN,PCN\n004336,MEDDADV\n")
        self.assertEqual(pairs, {"004336|MEDDADV"})

    def test_header_only_gives_empty_sets(self):
        pairs, bins = self.parse("BIN,PCN\n")
        self.assertEqual(pairs, set())
        self.assertEqual(bins, set())

    def test_missing_columns_raise(self):
        with self.assertRaises(SourceFetchError):
            self.parse("CARRIER,PLAN\nfoo,bar\n")

    def test_empty_text_raises(self):
        with self.assertRaises(SourceFetchError):
            self.parse("")

    def test_sets_mutated_in_place(self):
        pairs, bins = {"EXISTING|PAIR"}, {"EXISTING"}
        result = parse_reference_csv("BIN,PCN\n004336,MEDDADV\n", pairs, bins)
        self.assertIsNone(result)
        self.assertEqual(pairs, {"EXISTING|PAIR", "004336|MEDDADV"})
        self.assertEqual(bins, {"EXISTING", "004336"})


class TestReferenceStore(unittest.TestCase):
    """Test snapshot swapping and failure isolation."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = ReferenceStore()

    def test_empty_until_first_ingestion(self):
        snapshot = self.store.snapshot
        self.assertFalse(self.store.health())
        self.assertEqual(snapshot.medicare_pairs, frozenset())
        self.assertEqual(snapshot.medicaid_bin, frozenset())
        self.assertEqual(
            snapshot.commercial_bin,
            frozenset({"610502", "020099", "003858", "600428"})
        )

    def test_ingest_populates_source_tables(self):
        count = self.store.ingest(MEDICARE_PART_D, PARTD_CSV)
        snapshot = self.store.snapshot

        self.assertEqual(count, 3)
        self.assertTrue(self.store.health())
        self.assertIn("004336|MEDDADV", snapshot.medicare_pairs)
        self.assertIn("015581", snapshot.medicare_bin)
        self.assertEqual(snapshot.medicaid_pairs, frozenset())

    def test_sources_are_independent(self):
        self.store.ingest(MEDICARE_PART_D, PARTD_CSV)
        self.store.ingest(STATE_MEDICAID, MEDICAID_CSV)
        snapshot = self.store.snapshot

        self.assertIn("004336|MEDDADV", snapshot.medicare_pairs)
        self.assertIn("004740|MCDNY", snapshot.medicaid_pairs)
        self.assertNotIn("004740", snapshot.medicare_bin)

    def test_reingest_replaces_rather_than_merges(self):
        self.store.ingest(MEDICARE_PART_D, PARTD_CSV)
        self.store.ingest(MEDICARE_PART_D, "BIN,PCN\n777777,NEWPCN\n")
        snapshot = self.store.snapshot

        self.assertEqual(snapshot.medicare_pairs, frozenset({"777777|NEWPCN"}))
        self.assertEqual(snapshot.medicare_bin, frozenset({"777777"}))

    def test_ingesting_same_text_twice_is_idempotent(self):
        self.store.ingest(STATE_MEDICAID, MEDICAID_CSV)
        first = self.store.snapshot
        self.store.ingest(STATE_MEDICAID, MEDICAID_CSV)
        second = self.store.snapshot

        self.assertEqual(first.medicaid_pairs, second.medicaid_pairs)
        self.assertEqual(first.medicaid_bin, second.medicaid_bin)

    def test_failed_parse_keeps_previous_tables(self):
        self.store.ingest(MEDICARE_PART_D, PARTD_CSV)
        before = self.store.snapshot

        with self.assertRaises(SourceFetchError):
            self.store.ingest(MEDICARE_PART_D, "<html>Service Unavailable</html>")

        self.assertIs(self.store.snapshot, before)
        self.assertIn("004336|MEDDADV", self.store.snapshot.medicare_pairs)

    def test_old_snapshot_unchanged_by_later_ingest(self):
        self.store.ingest(MEDICARE_PART_D, PARTD_CSV)
        held = self.store.snapshot

        self.store.ingest(MEDICARE_PART_D, "BIN,PCN\n777777,NEWPCN\n")

        self.assertIn("004336|MEDDADV", held.medicare_pairs)
        self.assertNotIn("777777|NEWPCN", held.medicare_pairs)

    def test_unknown_source_rejected(self):
        with self.assertRaises(ValueError):
            self.store.ingest("commercial", PARTD_CSV)

    def test_source_counts(self):
        self.store.ingest(STATE_MEDICAID, MEDICAID_CSV)
        counts = self.store.snapshot.source_counts()

        self.assertTrue(counts[STATE_MEDICAID]["loaded"])
        self.assertEqual(counts[STATE_MEDICAID]["pairs"], 2)
        self.assertEqual(counts[STATE_MEDICAID]["bins"], 2)
        self.assertFalse(counts[MEDICARE_PART_D]["loaded"])
        self.assertIsNone(counts[MEDICARE_PART_D]["loaded_at"])


if __name__ == "__main__":
    unittest.main()
