from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional
import logging

from config import MAX_USER_COUNT, MIN_USER_COUNT, REGIONS

logger = logging.getLogger(__name__)


class QueryValidationError(ValueError):
    """Raised when query parameters cannot be sent to the record source."""


class FetchFailure(Exception):
    """Raised when the record source cannot produce a list of people."""


class SchemaFormat(Enum):
    # record field -> path into a user object of the remote payload
    GRAPHQL = {
        "gender": ("gender",),
        "first_name": ("name", "first"),
        "last_name": ("name", "last"),
        "age": ("dob", "age"),
        "region": ("location", "state"),
    }


def _lookup(payload: Dict[str, Any], path) -> Any:
    value = payload
    for key in path:
        if value is None:
            return None
        value = value[key]
    return value


@dataclass(frozen=True)
class PersonRecord:
    gender: str
    last_name: str
    age: int
    region: Optional[str] = None
    first_name: str = ""

    @classmethod
    def from_payload(
        cls, payload: Dict[str, Any], schema_format: SchemaFormat = SchemaFormat.GRAPHQL
    ) -> "PersonRecord":
        """Build a record from one user object of the remote response.

        Raises KeyError or TypeError when a required field is missing.
        """
        paths = schema_format.value
        gender = _lookup(payload, paths["gender"])
        last_name = _lookup(payload, paths["last_name"])
        age = _lookup(payload, paths["age"])
        if not isinstance(gender, str) or not isinstance(last_name, str):
            raise TypeError(f"gender and last name must be strings: {payload!r}")
        if isinstance(age, bool) or not isinstance(age, int):
            raise TypeError(f"age must be an integer: {payload!r}")

        try:
            region = _lookup(payload, paths["region"])
        except (KeyError, TypeError):
            region = None
        try:
            first_name = _lookup(payload, paths["first_name"]) or ""
        except (KeyError, TypeError):
            first_name = ""

        return cls(
            gender=gender,
            last_name=last_name,
            age=age,
            region=region or None,
            first_name=first_name,
        )


@dataclass(frozen=True)
class QueryParameters:
    count: int
    region: str

    def validate(self, valid_regions: Iterable[str] = REGIONS) -> None:
        """Raise QueryValidationError if the parameters are out of range."""
        count = self.count
        if (
            isinstance(count, bool)
            or not isinstance(count, int)
            or count < MIN_USER_COUNT
            or count > MAX_USER_COUNT
        ):
            raise QueryValidationError(
                f"User count must be between {MIN_USER_COUNT} and {MAX_USER_COUNT}"
            )
        if self.region not in set(valid_regions):
            raise QueryValidationError("Please select a valid nationality")


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Distributions derived from one fetched list of people.

    Every table except ``surname_length_counts`` holds percentages of
    ``total_records``; the surname table holds raw counts keyed by length.
    """

    gender_distribution: Dict[str, float] = field(default_factory=dict)
    age_bracket_distribution: Dict[str, float] = field(default_factory=dict)
    surname_length_counts: Dict[str, int] = field(default_factory=dict)
    top_region_distribution: Dict[str, float] = field(default_factory=dict)
    total_records: int = 0

    @classmethod
    def empty(cls) -> "StatisticsSnapshot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.total_records == 0
