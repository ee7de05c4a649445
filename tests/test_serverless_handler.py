"""
Test the serverless classify handler.
"""

import threading
import time
import unittest
from unittest import mock

import serverless_handler
from plan_classifier.classification.engine import ClassificationEngine
from plan_classifier.config.classifier_config import MEDICARE_PART_D
from plan_classifier.reference.store import ReferenceStore


class TestServerlessHandler(unittest.TestCase):
    """Test method checks and classification through the handler."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = ClassificationEngine(ReferenceStore())
        self.engine.ingest(MEDICARE_PART_D, "BIN,PCN\n004336,MEDDADV\n")

    def tearDown(self):
        serverless_handler._engine = None

    def test_post_only(self):
        for method in ("GET", "PUT", "", None):
            payload, status = serverless_handler.handler(method, {}, engine=self.engine)
            self.assertEqual(status, 405)
            self.assertEqual(payload, {"error": "POST only"})

    def test_classify(self):
        payload, status = serverless_handler.handler(
            "post", {"bin": "004336", "pcn": "MEDDADV"}, engine=self.engine
        )
        self.assertEqual(status, 200)
        self.assertEqual(payload, {"plan": "Medicare Part D / MA-PD", "confidence": 0.99})

    def test_malformed_body(self):
        payload, status = serverless_handler.handler("POST", "garbage", engine=self.engine)
        self.assertEqual(status, 200)
        self.assertEqual(payload, {"plan": "Unknown – manual review", "confidence": 0})

    def test_engine_created_once_on_cold_start(self):
        serverless_handler._engine = None
        with mock.patch.object(serverless_handler, "refresh_reference_data") as mock_refresh:
            first, _ = serverless_handler.handler("POST", {"bin": "610502"})
            second, _ = serverless_handler.handler("POST", {"bin": "610502"})

        mock_refresh.assert_called_once()
        self.assertEqual(mock_refresh.call_args[1]["cache_dir"], "")
        self.assertEqual(first, {"plan": "Commercial", "confidence": 0.9})
        self.assertEqual(first, second)

    def test_concurrent_cold_starts_refresh_once(self):
        serverless_handler._engine = None
        engines = []

        def slow_refresh(store, cache_dir=None):
            time.sleep(0.05)

        def call():
            engines.append(serverless_handler.get_engine())

        with mock.patch.object(
            serverless_handler, "refresh_reference_data", side_effect=slow_refresh
        ) as mock_refresh:
            threads = [threading.Thread(target=call) for _ in range(4)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=10)

        mock_refresh.assert_called_once()
        self.assertEqual(len(engines), 4)
        self.assertTrue(all(engine is engines[0] for engine in engines))


if __name__ == "__main__":
    unittest.main()
