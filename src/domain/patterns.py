"""Pattern Library - Shapes, Formats and Synonym Tables.

This module holds every regex shape, parse format and synonym table used by
the field normalizers. It contains data only: normalizers look values up here
and never mutate them.

Architecture:
    - Pure domain data with zero infrastructure dependencies
    - Built once at process start and shared read-only across threads
    - Phone rules are derived from the configured country code
"""

import re
from dataclasses import dataclass
from re import Pattern
from types import MappingProxyType
from typing import Mapping, Optional

from src.domain.enums import Gender, LabTest, VitalType

DEFAULT_COUNTRY_CODE = "260"


@dataclass(frozen=True)
class DateFormat:
    """A shape regex paired with the strptime format used once the shape matches.

    Attributes:
        shape: Compiled full-match pattern describing the string layout
        parse_format: ``datetime.strptime`` format for strings of that shape
    """
    shape: Pattern[str]
    parse_format: str


@dataclass(frozen=True)
class PhoneRule:
    """Phone classification rule applied to a digits-only string.

    Attributes:
        name: Rule identifier (local, international, subscriber)
        shape: Compiled full-match pattern on the digits-only value
        prefix: Text prepended to the kept digits
        drop_leading: Number of leading digits removed before prefixing
    """
    name: str
    shape: Pattern[str]
    prefix: str
    drop_leading: int = 0

    def apply(self, digits: str) -> str:
        return f"{self.prefix}{digits[self.drop_leading:]}"


def _freeze(table: dict) -> Mapping:
    """Freeze a synonym table, adding each canonical label as its own synonym.

    Canonical output must re-normalize to itself ("Blood Pressure" is not in
    the raw synonym list but is a valid label).
    """
    frozen = dict(table)
    for member in set(table.values()):
        frozen.setdefault(member.value.lower(), member)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class PatternLibrary:
    """Read-only collection of patterns and synonym tables.

    Candidate tuples are ordered: the first shape that matches wins. The
    date-of-birth candidates deliberately keep the slash form day-first and
    the hyphen form month-first.

    Example Usage:
        ```python
        patterns = PatternLibrary.build(country_code="260")
        patterns.gender_synonyms["male"]  # Gender.MALE
        ```
    """

    date_of_birth_formats: tuple[DateFormat, ...]
    timestamp_formats: tuple[DateFormat, ...]
    phone_rules: tuple[PhoneRule, ...]
    gender_synonyms: Mapping[str, Gender]
    vital_type_synonyms: Mapping[str, VitalType]
    lab_test_synonyms: Mapping[str, LabTest]
    country_code: str = DEFAULT_COUNTRY_CODE
    non_digit: Pattern[str] = re.compile(r"[^0-9]")

    @classmethod
    def build(cls, country_code: Optional[str] = None) -> "PatternLibrary":
        """Build the standard pattern library.

        Parameters:
            country_code: Dialling code without ``+`` (default: ``"260"``)

        Returns:
            PatternLibrary: Immutable library for the given country code

        Raises:
            ValueError: If country_code is not made of digits only
        """
        code = (country_code or DEFAULT_COUNTRY_CODE).strip().lstrip("+")
        if not code.isdigit() or not code.isascii():
            raise ValueError(f"Country code must contain digits only. Got: {country_code!r}")

        return cls(
            date_of_birth_formats=(
                DateFormat(re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"), "%Y-%m-%d"),
                DateFormat(re.compile(r"^[0-9]{2}/[0-9]{2}/[0-9]{4}$"), "%d/%m/%Y"),
                DateFormat(re.compile(r"^[0-9]{2}-[0-9]{2}-[0-9]{4}$"), "%m-%d-%Y"),
            ),
            timestamp_formats=(
                DateFormat(
                    re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}$"),
                    "%Y-%m-%d %H:%M",
                ),
                DateFormat(
                    re.compile(r"^[0-9]{2}/[0-9]{2}/[0-9]{4} [0-9]{2}:[0-9]{2}$"),
                    "%d/%m/%Y %H:%M",
                ),
            ),
            phone_rules=(
                # 0971234567
                PhoneRule("local", re.compile(r"^0[0-9]{9}$"), f"+{code}", drop_leading=1),
                # 260971234567
                PhoneRule("international", re.compile(rf"^{code}[0-9]{{9}}$"), "+"),
                # 971234567
                PhoneRule("subscriber", re.compile(r"^[0-9]{9}$"), f"+{code}"),
            ),
            gender_synonyms=_freeze({
                "m": Gender.MALE,
                "male": Gender.MALE,
                "f": Gender.FEMALE,
                "female": Gender.FEMALE,
            }),
            vital_type_synonyms=_freeze({
                "temperature": VitalType.TEMPERATURE,
                "temp": VitalType.TEMPERATURE,
                "hr": VitalType.HEART_RATE,
                "heart rate": VitalType.HEART_RATE,
                "bp": VitalType.BLOOD_PRESSURE,
            }),
            lab_test_synonyms=_freeze({
                "wbc": LabTest.WBC,
                "hb": LabTest.HGB,
                "hgb": LabTest.HGB,
                "creatinine": LabTest.CREATININE,
            }),
            country_code=code,
        )


DEFAULT_PATTERNS = PatternLibrary.build()
