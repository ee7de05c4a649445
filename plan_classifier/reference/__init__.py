"""
Reference Data Module for the Plan Classifier.

Owns the BIN/PCN lookup tables:
- CSV ingestion (pandas)
- Snapshot store with atomic per-source swaps
- Download, disk cache and background refresh
"""

from .csv_ingest import parse_reference_csv
from .store import ReferenceStore, ReferenceSnapshot, SOURCE_TABLES
from .refresh import (
    fetch_text,
    refresh_source,
    refresh_reference_data,
    start_background_refresh,
    load_cached_reference_data,
    RefreshReport,
    SourceRefreshResult,
)

__all__ = [
    "parse_reference_csv",
    "ReferenceStore",
    "ReferenceSnapshot",
    "SOURCE_TABLES",
    "fetch_text",
    "refresh_source",
    "refresh_reference_data",
    "start_background_refresh",
    "load_cached_reference_data",
    "RefreshReport",
    "SourceRefreshResult",
]
