"""
BIN/PCN reference CSV ingestion.
Loads crosswalk CSV text into the pair and BIN lookup sets.
"""

import csv
import io
import logging
from typing import Set

import pandas as pd

from ..classification.preprocess import normalize_field, make_pair_key
from ..errors import SourceFetchError

logger = logging.getLogger(__name__)

BIN_COLUMN = "BIN"
PCN_COLUMN = "PCN"


def _read_csv_text(text: str, **kwargs) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        index_col=False,
        on_bad_lines="skip",
        **kwargs
    )


def _read_reference_frame(text: str, source_id: str) -> pd.DataFrame:
    """Read CSV text into an all-string DataFrame with canonical column names."""
    unquoted = False
    try:
        try:
            df = _read_csv_text(text)
        except pd.errors.ParserError as e:
            # An unbalanced quote swallows the rest of the file, so re-read
            # with quotes as plain characters and lose only the broken row
            logger.warning("[%s] Re-reading reference file without quoting: %s", source_id, e)
            df = _read_csv_text(text, quoting=csv.QUOTE_NONE)
            unquoted = True
    except pd.errors.EmptyDataError as e:
        raise SourceFetchError(source_id, f"empty reference file ({e})")
    except (pd.errors.ParserError, ValueError) as e:
        raise SourceFetchError(source_id, f"unreadable reference file ({e})")

    df.columns = [
        str(col).lstrip("\ufeff").strip().strip('"').strip().upper()
        for col in df.columns
    ]

    duplicated = df.columns.duplicated()
    if duplicated.any():
        logger.warning(
            "[%s] Duplicate header column(s) %s, keeping the first",
            source_id, sorted(set(df.columns[duplicated]))
        )
        df = df.loc[:, ~duplicated]

    missing = [col for col in (BIN_COLUMN, PCN_COLUMN) if col not in df.columns]
    if missing:
        raise SourceFetchError(
            source_id,
            f"reference file is missing column(s) {', '.join(missing)}"
        )

    # Short rows come back as NaN even with keep_default_na=False
    df = df[[BIN_COLUMN, PCN_COLUMN]].fillna("")
    if unquoted:
        for col in (BIN_COLUMN, PCN_COLUMN):
            df[col] = df[col].str.strip().str.strip('"')
    return df


def parse_reference_csv(
    text: str,
    pair_set: Set[str],
    bin_set: Set[str],
    source_id: str = "reference",
) -> None:
    """
    Parse BIN/PCN CSV text into the given sets.

    Rows missing a BIN or a PCN, rows with the wrong number of fields and
    rows broken by an unbalanced quote are dropped. Every kept row adds
    "BIN|PCN" to ``pair_set`` and BIN to ``bin_set``. Both sets are mutated
    in place.

    Args:
        text: Raw CSV text with a header row containing BIN and PCN
        pair_set: Set receiving "BIN|PCN" keys
        bin_set: Set receiving BINs
        source_id: Source name used in errors and log messages

    Raises:
        SourceFetchError: If the text cannot be read as CSV or lacks the
            BIN/PCN columns
    """
    df = _read_reference_frame(text, source_id)

    dropped = 0
    for raw_bin, raw_pcn in zip(df[BIN_COLUMN], df[PCN_COLUMN]):
        bin_value = normalize_field(raw_bin)
        pcn_value = normalize_field(raw_pcn)
        if not bin_value or not pcn_value:
            dropped += 1
            continue
        pair_set.add(make_pair_key(bin_value, pcn_value))
        bin_set.add(bin_value)

    if dropped:
        logger.debug("[%s] Dropped %d row(s) without BIN or PCN", source_id, dropped)
