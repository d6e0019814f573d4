"""
Statistics over a fetched list of random users.

Turns a sequence of PersonRecord into the four breakdowns shown on the
dashboard: gender, age bracket, surname length and top regions.

Requirements:
- pandas
- numpy
"""

from typing import Dict, List, Sequence
import logging

import numpy as np
import pandas as pd

from config import TOP_REGION_LIMIT
from models import PersonRecord, StatisticsSnapshot

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ["gender", "last_name", "age", "region"]

AGE_BRACKETS = ["0-20", "21-40", "41-60", "61-80", "81-100", "100+"]
# Right-closed bins reproduce the cascading "age <= upper bound" checks
AGE_BINS = [-np.inf, 20, 40, 60, 80, 100, np.inf]
OVERFLOW_BRACKET = AGE_BRACKETS[-1]


def utf16_length(value: str) -> int:
    """Length of a string in UTF-16 code units.

    Astral characters count twice and a lone surrogate counts once.
    """
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def records_to_frame(records: Sequence[PersonRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "gender": r.gender,
                "last_name": r.last_name,
                "age": r.age,
                "region": r.region,
            }
            for r in records
        ],
        columns=RECORD_COLUMNS,
        dtype=object,
    )


def _counts_in_order_seen(values: pd.Series) -> pd.Series:
    """value_counts() indexed in order of first appearance."""
    return values.value_counts().reindex(pd.unique(values))


def _as_percentages(counts: pd.Series, total: int) -> Dict[str, float]:
    if total == 0:
        return {}
    return {str(label): float(n) / total * 100 for label, n in counts.items()}


def gender_distribution(df: pd.DataFrame) -> Dict[str, float]:
    counts = _counts_in_order_seen(df["gender"])
    return _as_percentages(counts, len(df))


def age_bracket_distribution(df: pd.DataFrame) -> Dict[str, float]:
    if df.empty:
        return {}
    ages = pd.to_numeric(df["age"], errors="coerce")
    brackets = pd.cut(ages, bins=AGE_BINS, labels=AGE_BRACKETS, right=True)
    # A missing age fails every comparison and falls through to the last bracket
    brackets = brackets.fillna(OVERFLOW_BRACKET)
    counts = brackets.value_counts(sort=False).reindex(AGE_BRACKETS, fill_value=0)
    return _as_percentages(counts, len(df))


def surname_length_counts(df: pd.DataFrame) -> Dict[str, int]:
    lengths = df["last_name"].map(utf16_length)
    counts = _counts_in_order_seen(lengths)
    return {str(length): int(n) for length, n in counts.items()}


def top_region_distribution(
    df: pd.DataFrame, limit: int = TOP_REGION_LIMIT
) -> Dict[str, float]:
    regions = df["region"]
    regions = regions[regions.notna() & (regions != "")]
    if regions.empty:
        return {}
    counts = _counts_in_order_seen(regions)
    top = counts.sort_values(ascending=False, kind="stable").head(limit)
    # Denominator is every record, including those without a region
    return _as_percentages(top, len(df))


def compute_statistics(records: Sequence[PersonRecord]) -> StatisticsSnapshot:
    """Derive a StatisticsSnapshot from a list of people.

    An empty input yields a snapshot whose four tables are all empty.
    """
    if not records:
        return StatisticsSnapshot.empty()

    df = records_to_frame(records)
    snapshot = StatisticsSnapshot(
        gender_distribution=gender_distribution(df),
        age_bracket_distribution=age_bracket_distribution(df),
        surname_length_counts=surname_length_counts(df),
        top_region_distribution=top_region_distribution(df),
        total_records=len(df),
    )
    logger.debug(
        f"Computed statistics: records={snapshot.total_records} "
        f"genders={len(snapshot.gender_distribution)} "
        f"regions={len(snapshot.top_region_distribution)}"
    )
    return snapshot


def sorted_lengths(counts: Dict[str, int]) -> List[str]:
    return sorted(counts, key=int)
