"""
Reference Store for BIN/PCN lookup tables.

Holds the current ReferenceSnapshot. A snapshot is immutable; ingestion
builds new sets off to the side and swaps in a whole new snapshot, so a
classification call that grabbed a snapshot keeps a consistent view even
while a refresh is running.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Optional, Set

from ..config.classifier_config import (
    CLASSIFIER_CONFIG,
    MEDICARE_PART_D,
    STATE_MEDICAID,
)
from .csv_ingest import parse_reference_csv

logger = logging.getLogger(__name__)

# Source -> (pair attribute, BIN attribute) on ReferenceSnapshot
SOURCE_TABLES = {
    MEDICARE_PART_D: ("medicare_pairs", "medicare_bin"),
    STATE_MEDICAID: ("medicaid_pairs", "medicaid_bin"),
}


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Point-in-time view of every lookup table."""
    medicare_pairs: FrozenSet[str] = frozenset()
    medicare_bin: FrozenSet[str] = frozenset()
    medicaid_pairs: FrozenSet[str] = frozenset()
    medicaid_bin: FrozenSet[str] = frozenset()
    commercial_bin: FrozenSet[str] = frozenset(CLASSIFIER_CONFIG["commercial_bins"])

    # source_id -> time of the last successful ingestion
    loaded_at: Dict[str, datetime] = field(default_factory=dict)

    @property
    def is_loaded(self) -> bool:
        return bool(self.loaded_at)

    def source_counts(self) -> Dict[str, Dict]:
        """Pair and BIN counts per source, for health reporting."""
        counts = {}
        for source_id, (pair_attr, bin_attr) in SOURCE_TABLES.items():
            loaded_at = self.loaded_at.get(source_id)
            counts[source_id] = {
                "loaded": loaded_at is not None,
                "pairs": len(getattr(self, pair_attr)),
                "bins": len(getattr(self, bin_attr)),
                "loaded_at": loaded_at.isoformat() if loaded_at else None,
            }
        return counts


class ReferenceStore:
    """Process-wide owner of the reference snapshot."""

    def __init__(self, commercial_bins: Optional[Iterable[str]] = None):
        """
        Initialize an empty store.

        Args:
            commercial_bins: Override for the fixed commercial BIN list
        """
        if commercial_bins is None:
            commercial_bins = CLASSIFIER_CONFIG["commercial_bins"]
        self._snapshot = ReferenceSnapshot(commercial_bin=frozenset(commercial_bins))
        self._write_lock = threading.Lock()

    @property
    def snapshot(self) -> ReferenceSnapshot:
        """Current snapshot. Callers should read it once per operation."""
        return self._snapshot

    def ingest(self, source_id: str, raw_text: str) -> int:
        """
        Replace one source's tables with the contents of ``raw_text``.

        The new sets are only swapped in after the whole text parsed. On
        failure the source's previous tables stay in place.

        Args:
            source_id: MEDICARE_PART_D or STATE_MEDICAID
            raw_text: CSV text with BIN and PCN columns

        Returns:
            Number of distinct BIN|PCN pairs now loaded for the source

        Raises:
            ValueError: Unknown source_id
            SourceFetchError: The text could not be parsed
        """
        if source_id not in SOURCE_TABLES:
            raise ValueError(f"Unknown reference source: {source_id!r}")

        pair_set: Set[str] = set()
        bin_set: Set[str] = set()
        parse_reference_csv(raw_text, pair_set, bin_set, source_id=source_id)

        pair_attr, bin_attr = SOURCE_TABLES[source_id]
        with self._write_lock:
            current = self._snapshot
            loaded_at = dict(current.loaded_at)
            loaded_at[source_id] = datetime.now()
            self._snapshot = replace(
                current,
                loaded_at=loaded_at,
                **{pair_attr: frozenset(pair_set), bin_attr: frozenset(bin_set)}
            )

        logger.info(
            "[%s] Loaded %d BIN|PCN pairs across %d BINs",
            source_id, len(pair_set), len(bin_set)
        )
        return len(pair_set)

    def health(self) -> bool:
        """True once at least one source has been ingested."""
        return self._snapshot.is_loaded
