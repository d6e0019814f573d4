"""Tests for the user statistics breakdowns."""

import json
import random

import pytest

from models import PersonRecord, StatisticsSnapshot
from user_stats import (
    AGE_BRACKETS,
    compute_statistics,
    records_to_frame,
    top_region_distribution,
    utf16_length,
)


def _person(gender="female", last_name="Smith", age=30, region="CA"):
    return PersonRecord(gender=gender, last_name=last_name, age=age, region=region)


def _random_people(n, seed=7):
    rng = random.Random(seed)
    regions = ["CA", "TX", "NY", "WA", "OR", None, "", "FL", "GA", "OH", "MI", "AZ"]
    return [
        _person(
            gender=rng.choice(["female", "male", "nonbinary"]),
            last_name="x" * rng.randint(1, 14),
            age=rng.randint(0, 110),
            region=rng.choice(regions),
        )
        for _ in range(n)
    ]


# ---------------------------------------------------------------------------
# Worked example


def test_two_person_example() -> None:
    records = [
        _person(gender="female", age=25, last_name="Smith", region="CA"),
        _person(gender="male", age=70, last_name="Lee", region="CA"),
    ]
    stats = compute_statistics(records)

    assert stats.gender_distribution == {"female": 50.0, "male": 50.0}
    assert stats.age_bracket_distribution == {
        "0-20": 0.0,
        "21-40": 50.0,
        "41-60": 0.0,
        "61-80": 50.0,
        "81-100": 0.0,
        "100+": 0.0,
    }
    assert stats.surname_length_counts == {"5": 1, "3": 1}
    assert stats.top_region_distribution == {"CA": 100.0}
    assert stats.total_records == 2


def test_empty_input_gives_empty_tables() -> None:
    stats = compute_statistics([])

    assert stats == StatisticsSnapshot.empty()
    assert stats.gender_distribution == {}
    assert stats.age_bracket_distribution == {}
    assert stats.surname_length_counts == {}
    assert stats.top_region_distribution == {}
    assert stats.is_empty


# ---------------------------------------------------------------------------
# Gender


def test_gender_labels_are_taken_verbatim() -> None:
    records = [
        _person(gender="Female"),
        _person(gender="female"),
        _person(gender="female"),
        _person(gender="x"),
    ]
    stats = compute_statistics(records)

    assert list(stats.gender_distribution) == ["Female", "female", "x"]
    assert stats.gender_distribution["female"] == pytest.approx(50.0)
    assert stats.gender_distribution["Female"] == pytest.approx(25.0)


# ---------------------------------------------------------------------------
# Age brackets


@pytest.mark.parametrize(
    "age, bracket",
    [
        (0, "0-20"),
        (20, "0-20"),
        (21, "21-40"),
        (40, "21-40"),
        (41, "41-60"),
        (60, "41-60"),
        (61, "61-80"),
        (80, "61-80"),
        (81, "81-100"),
        (100, "81-100"),
        (101, "100+"),
        (130, "100+"),
    ],
)
def test_age_bracket_upper_bounds_are_inclusive(age, bracket) -> None:
    stats = compute_statistics([_person(age=age)])

    assert stats.age_bracket_distribution[bracket] == 100.0
    assert sum(stats.age_bracket_distribution.values()) == pytest.approx(100.0)


def test_negative_age_falls_through_to_first_matching_bracket() -> None:
    stats = compute_statistics([_person(age=-3), _person(age=50)])

    assert stats.age_bracket_distribution["0-20"] == 50.0
    assert stats.age_bracket_distribution["41-60"] == 50.0


def test_age_brackets_keep_fixed_order() -> None:
    stats = compute_statistics([_person(age=99), _person(age=5)])

    assert list(stats.age_bracket_distribution) == AGE_BRACKETS


# ---------------------------------------------------------------------------
# Surname lengths


def test_surname_lengths_are_raw_counts() -> None:
    records = [
        _person(last_name="Lee"),
        _person(last_name="Kim"),
        _person(last_name="Ødegård"),
        _person(last_name=""),
    ]
    stats = compute_statistics(records)

    assert stats.surname_length_counts == {"3": 2, "7": 1, "0": 1}
    assert all(isinstance(n, int) for n in stats.surname_length_counts.values())


def test_utf16_length_counts_astral_characters_twice() -> None:
    assert utf16_length("Smith") == 5
    assert utf16_length("Ødegård") == 7
    assert utf16_length("\U0001d49cbc") == 4
    assert utf16_length("") == 0


def test_lone_surrogate_surname_counts_one_unit() -> None:
    # JSON "\ud800" decodes to a str holding an unpaired surrogate
    payload = json.loads('{"gender": "female", "name": {"last": "\\ud800x"}, "dob": {"age": 30}}')
    record = PersonRecord.from_payload(payload)
    stats = compute_statistics([record, _person(last_name="Li", region="\ud83dCA")])

    assert utf16_length("\ud800") == 1
    assert stats.surname_length_counts == {"2": 2}
    assert stats.top_region_distribution == {"\ud83dCA": 50.0}
    assert stats.gender_distribution == {"female": 100.0}


# ---------------------------------------------------------------------------
# Regions


def test_regions_exclude_missing_but_keep_full_denominator() -> None:
    records = [
        _person(region="CA"),
        _person(region=None),
        _person(region=""),
        _person(region="CA"),
    ]
    stats = compute_statistics(records)

    assert stats.top_region_distribution == {"CA": 50.0}


def test_region_ties_keep_first_seen_order() -> None:
    records = [_person(region=r) for r in ["TX", "CA", "NY", "CA", "TX", "WA", "WA"]]
    stats = compute_statistics(records)

    assert list(stats.top_region_distribution) == ["TX", "CA", "WA", "NY"]


def test_top_regions_limited_to_ten_highest() -> None:
    records = []
    for i in range(12):
        records.extend(_person(region=f"R{i:02d}") for _ in range(i + 1))
    stats = compute_statistics(records)

    assert len(stats.top_region_distribution) == 10
    assert list(stats.top_region_distribution) == [f"R{i:02d}" for i in range(11, 1, -1)]
    assert stats.top_region_distribution["R11"] == pytest.approx(12 / len(records) * 100)


def test_top_regions_when_no_record_has_a_region() -> None:
    df = records_to_frame([_person(region=None), _person(region="")])

    assert top_region_distribution(df) == {}


# ---------------------------------------------------------------------------
# Properties over a larger sample


@pytest.mark.parametrize("n", [1, 17, 500])
def test_distribution_totals(n) -> None:
    records = _random_people(n)
    stats = compute_statistics(records)

    assert sum(stats.gender_distribution.values()) == pytest.approx(100.0)
    assert sum(stats.age_bracket_distribution.values()) == pytest.approx(100.0)
    assert sum(stats.surname_length_counts.values()) == n

    region_values = list(stats.top_region_distribution.values())
    assert len(region_values) <= 10
    assert region_values == sorted(region_values, reverse=True)
    assert None not in stats.top_region_distribution
    assert "" not in stats.top_region_distribution


def test_compute_statistics_does_not_mutate_input() -> None:
    records = _random_people(20)
    before = list(records)
    compute_statistics(records)

    assert records == before
