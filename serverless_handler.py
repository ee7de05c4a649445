"""
Serverless entry point for plan classification.

Platform adapters pass the HTTP method and the decoded JSON body and turn
the returned (payload, status) pair into their own response type.
"""

import logging
import threading
from typing import Any, Dict, Optional, Tuple

from plan_classifier import ClassificationEngine, ReferenceStore
from plan_classifier.reference.refresh import refresh_reference_data

logger = logging.getLogger(__name__)

_engine: Optional[ClassificationEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> ClassificationEngine:
    """Create the per-instance engine on cold start, loading reference data once."""
    global _engine
    with _engine_lock:
        if _engine is None:
            engine = ClassificationEngine(ReferenceStore())
            # No disk cache: serverless filesystems are ephemeral
            refresh_reference_data(engine.store, cache_dir="")
            _engine = engine
    return _engine


def handler(
    method: str,
    body: Any,
    engine: Optional[ClassificationEngine] = None,
) -> Tuple[Dict[str, Any], int]:
    """
    Handle a classify request.

    Args:
        method: HTTP method
        body: Decoded JSON body (anything; non-objects classify as empty)
        engine: Engine override, mainly for tests

    Returns:
        (response payload, HTTP status)
    """
    if (method or "").upper() != "POST":
        return {"error": "POST only"}, 405

    if engine is None:
        engine = get_engine()

    result = engine.classify(body if isinstance(body, dict) else {})
    return result.to_dict(), 200
