"""
Reference data refresh.

Downloads the Part D and Medicaid BIN/PCN files, caches the raw text on
disk and ingests it into a ReferenceStore. Each source is handled on its
own: a failed source is logged and keeps its previous tables, and never
stops the other source or classification.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from ..config.classifier_config import SOURCE_CONFIG
from ..errors import SourceFetchError
from .store import ReferenceStore

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]


@dataclass
class SourceRefreshResult:
    """Outcome of refreshing one reference source."""
    source_id: str
    success: bool
    pair_count: int = 0
    error_message: str = ""
    cached_path: Optional[str] = None


@dataclass
class RefreshReport:
    """Outcome of a refresh run across sources."""
    results: List[SourceRefreshResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> List[str]:
        return [r.source_id for r in self.results if r.success]

    @property
    def failed(self) -> List[str]:
        return [r.source_id for r in self.results if not r.success]

    def to_dict(self) -> Dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "sources": {
                r.source_id: {
                    "success": r.success,
                    "pairs": r.pair_count,
                    "error": r.error_message or None,
                }
                for r in self.results
            },
        }


def fetch_text(location: str, timeout: Optional[float] = None) -> str:
    """
    Fetch reference text from a URL or a local file.

    Args:
        location: http(s):// URL, file:// URL or filesystem path
        timeout: Request timeout in seconds (defaults to SOURCE_CONFIG)

    Returns:
        Raw text of the resource

    Raises:
        SourceFetchError: On any network, HTTP or filesystem failure
    """
    if timeout is None:
        timeout = SOURCE_CONFIG["fetch_timeout"]

    parsed = urlparse(location)
    if parsed.scheme in ("http", "https"):
        try:
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SourceFetchError(location, f"download failed ({e})")
        return response.text

    if parsed.scheme == "file":
        path = Path(url2pathname(parsed.path))
    else:
        path = Path(location)

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceFetchError(location, f"read failed ({e})")


def _write_cache(cache_dir: str, filename: str, text: str) -> str:
    os.makedirs(cache_dir, exist_ok=True)
    path = os.path.join(cache_dir, filename)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


def refresh_source(
    store: ReferenceStore,
    source_id: str,
    fetcher: Fetcher = fetch_text,
    cache_dir: Optional[str] = None,
) -> SourceRefreshResult:
    """
    Fetch, cache and ingest a single reference source.

    Failures, including unexpected exceptions from a custom fetcher, are
    logged and reported in the result; they are never raised.
    The cache file is only written once the download succeeded, and a
    cache write failure does not prevent ingestion.
    """
    source = SOURCE_CONFIG["sources"][source_id]
    result = SourceRefreshResult(source_id=source_id, success=False)

    try:
        text = fetcher(source["url"])
    except SourceFetchError as e:
        result.error_message = str(e)
        logger.error("[%s] Reference fetch failed: %s", source_id, e)
        return result
    except Exception as e:
        result.error_message = f"{source_id}: unexpected fetch error ({e!r})"
        logger.error("[%s] Reference fetch failed unexpectedly: %r", source_id, e, exc_info=True)
        return result

    if cache_dir:
        try:
            result.cached_path = _write_cache(cache_dir, source["cache_file"], text)
        except (OSError, TypeError) as e:
            logger.warning("[%s] Could not cache reference file: %s", source_id, e)

    try:
        result.pair_count = store.ingest(source_id, text)
    except SourceFetchError as e:
        result.error_message = str(e)
        logger.error("[%s] Reference parse failed, keeping previous tables: %s", source_id, e)
        return result
    except Exception as e:
        result.error_message = f"{source_id}: unexpected parse error ({e!r})"
        logger.error(
            "[%s] Reference parse failed unexpectedly, keeping previous tables: %r",
            source_id, e, exc_info=True
        )
        return result

    result.success = True
    return result


def refresh_reference_data(
    store: ReferenceStore,
    sources: Optional[Iterable[str]] = None,
    fetcher: Fetcher = fetch_text,
    cache_dir: Optional[str] = None,
) -> RefreshReport:
    """
    Refresh every configured reference source, one at a time.

    Args:
        store: Store to update
        sources: Source ids to refresh (default: all configured sources)
        fetcher: Callable returning the raw text for a source URL
        cache_dir: Directory for cached copies (default: SOURCE_CONFIG data_dir,
            pass "" to disable caching)

    Returns:
        RefreshReport describing each source's outcome
    """
    if sources is None:
        sources = list(SOURCE_CONFIG["sources"])
    if cache_dir is None:
        cache_dir = SOURCE_CONFIG["data_dir"]

    report = RefreshReport()
    for source_id in sources:
        report.results.append(
            refresh_source(store, source_id, fetcher=fetcher, cache_dir=cache_dir)
        )
    report.finished_at = datetime.now()

    logger.info(
        "Reference refresh finished: %d succeeded, %d failed",
        len(report.succeeded), len(report.failed)
    )
    return report


def start_background_refresh(
    store: ReferenceStore,
    sources: Optional[Iterable[str]] = None,
    fetcher: Fetcher = fetch_text,
    cache_dir: Optional[str] = None,
) -> threading.Thread:
    """
    Run refresh_reference_data on a daemon thread and return the thread.

    Classification keeps using the current snapshot until each source's
    new tables are swapped in.
    """
    thread = threading.Thread(
        target=refresh_reference_data,
        kwargs={
            "store": store,
            "sources": sources,
            "fetcher": fetcher,
            "cache_dir": cache_dir,
        },
        name="reference-refresh",
        daemon=True,
    )
    thread.start()
    return thread


def load_cached_reference_data(
    store: ReferenceStore,
    cache_dir: Optional[str] = None,
) -> RefreshReport:
    """
    Warm-start the store from previously cached reference files.

    Missing or unreadable cache files count as failed sources.
    """
    if cache_dir is None:
        cache_dir = SOURCE_CONFIG["data_dir"]

    report = RefreshReport()
    for source_id, source in SOURCE_CONFIG["sources"].items():
        path = os.path.join(cache_dir, source["cache_file"])
        result = SourceRefreshResult(source_id=source_id, success=False, cached_path=path)
        try:
            result.pair_count = store.ingest(source_id, fetch_text(path))
            result.success = True
        except SourceFetchError as e:
            result.error_message = str(e)
            logger.warning("[%s] No usable cached reference file: %s", source_id, e)
        report.results.append(result)
    report.finished_at = datetime.now()
    return report
