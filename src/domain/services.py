"""Field Normalization Service.

This module provides the FieldNormalizer class responsible for turning one
raw field value into its canonical representation. Each logical field has its
own normalizer; all of them are pure functions of a single input value and the
read-only PatternLibrary.

Data Quality Impact:
    - Every normalizer is total: unrecognised input resolves to a fixed
      fallback ("Unknown", None, or an invalid phone flag), never an exception
    - Shape checks precede format parsing, so partial parses cannot happen
    - Impossible calendar values (day 32, 30 February) fail closed to None

Architecture:
    - Pure domain service with zero infrastructure dependencies
    - Stateless: safe to call concurrently from any number of threads
    - Patterns are injected (defaults to DEFAULT_PATTERNS) for testing
"""

import logging
import re
from datetime import date, datetime
from typing import Mapping, Optional, Sequence, TypeVar, Union

from src.domain.enums import Gender, LabTest, VitalType
from src.domain.golden_record import PhoneNumber
from src.domain.patterns import DEFAULT_PATTERNS, DateFormat, PatternLibrary

logger = logging.getLogger(__name__)

E = TypeVar("E")

PATIENT_ID_PREFIX = "P-"
PATIENT_ID_WIDTH = 4
UNKNOWN_NAME = "Unknown"

_TOKEN = re.compile(r"\S+")


class FieldNormalizer:
    """Per-field normalization rules.

    All methods are static and side-effect free. Fallback policy:
        - patient_id: digits only, right-most four kept, zero padded
        - full_name: "Unknown" when absent or blank
        - gender / vital_type / lab_test: the enum's UNKNOWN member on no match
        - dates and timestamps: None on no match or impossible value
        - phone: (None, is_invalid=True) on no match
        - vital_value / lab_result: trimmed text, None stays None
    """

    @staticmethod
    def normalize_patient_id(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> str:
        """Build the canonical ``P-####`` identifier.

        Non-digit characters are discarded. Digit strings shorter than four are
        left-padded with zeros; longer ones keep only their right-most four
        digits. An input with no digits yields ``P-0000``.

        Parameters:
            value: Raw identifier (e.g. " p12 ", "PAT-0042", "12345")
            patterns: Pattern library providing the non-digit pattern

        Returns:
            str: Identifier matching ``^P-\\d{4}$``
        """
        digits = patterns.non_digit.sub("", value or "")
        if len(digits) > PATIENT_ID_WIDTH:
            digits = digits[-PATIENT_ID_WIDTH:]
        return f"{PATIENT_ID_PREFIX}{digits.rjust(PATIENT_ID_WIDTH, '0')}"

    @staticmethod
    def normalize_name(value: Optional[str]) -> str:
        """Trim and title-case a full name, falling back to "Unknown".

        Each whitespace-separated token gets a title-case first character and
        lowercase remainder; whitespace between tokens is kept as-is.
        """
        trimmed = (value or "").strip()
        if not trimmed:
            return UNKNOWN_NAME
        return _TOKEN.sub(lambda m: m.group(0)[:1].title() + m.group(0)[1:].lower(), trimmed)

    @staticmethod
    def normalize_category(value: Optional[str], table: Mapping[str, E], fallback: E) -> E:
        """Map a categorical value through a synonym table.

        Parameters:
            value: Raw label (any case, surrounding whitespace allowed)
            table: Lower-case synonym to canonical label mapping
            fallback: Label returned for absent or unmatched input

        Returns:
            Canonical label from the table, or fallback
        """
        if value is None:
            return fallback
        return table.get(value.strip().lower(), fallback)

    @staticmethod
    def normalize_gender(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> Gender:
        return FieldNormalizer.normalize_category(value, patterns.gender_synonyms, Gender.UNKNOWN)

    @staticmethod
    def normalize_vital_type(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> VitalType:
        return FieldNormalizer.normalize_category(value, patterns.vital_type_synonyms, VitalType.UNKNOWN)

    @staticmethod
    def normalize_lab_test(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> LabTest:
        return FieldNormalizer.normalize_category(value, patterns.lab_test_synonyms, LabTest.UNKNOWN)

    @staticmethod
    def parse_with_formats(
        value: Optional[str],
        formats: Sequence[DateFormat],
        as_date: bool = False,
    ) -> Optional[Union[date, datetime]]:
        """Parse a date/time string against ordered shape candidates.

        The first candidate whose shape matches the trimmed input decides the
        outcome. A shape match that does not denote a real calendar value
        returns None; later candidates are not tried.

        Parameters:
            value: Raw date or timestamp text
            formats: Ordered candidates, first match wins
            as_date: Return a ``date`` instead of a ``datetime``

        Returns:
            Parsed value, or None when no shape matches or parsing fails
        """
        if value is None:
            return None

        text = value.strip()
        for candidate in formats:
            if not candidate.shape.match(text):
                continue
            try:
                parsed = datetime.strptime(text, candidate.parse_format)
            except ValueError:
                logger.debug(
                    f"Value matched shape {candidate.parse_format!r} but is not a valid calendar value"
                )
                return None
            return parsed.date() if as_date else parsed

        return None

    @staticmethod
    def normalize_date_of_birth(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> Optional[date]:
        """Parse a date of birth (ISO, DD/MM/YYYY, then MM-DD-YYYY)."""
        return FieldNormalizer.parse_with_formats(value, patterns.date_of_birth_formats, as_date=True)

    @staticmethod
    def normalize_timestamp(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> Optional[datetime]:
        """Parse an admission/discharge timestamp (ISO, then DD/MM/YYYY HH:MM)."""
        return FieldNormalizer.parse_with_formats(value, patterns.timestamp_formats)

    @staticmethod
    def normalize_phone(value: Optional[str], patterns: PatternLibrary = DEFAULT_PATTERNS) -> PhoneNumber:
        """Normalize a phone number to international form.

        Non-digits are removed, then the phone rules are tried in order:
        leading-zero local numbers, numbers already carrying the country code,
        and bare nine-digit subscriber numbers.

        Parameters:
            value: Raw phone text (any punctuation)
            patterns: Pattern library providing the phone rules

        Returns:
            PhoneNumber: Normalized number with is_invalid=False, or
            number=None with is_invalid=True when no rule matched
        """
        digits = patterns.non_digit.sub("", value or "")
        for rule in patterns.phone_rules:
            if rule.shape.match(digits):
                return PhoneNumber(number=rule.apply(digits), is_invalid=False)
        return PhoneNumber(number=None, is_invalid=True)

    @staticmethod
    def normalize_free_text(value: Optional[str]) -> Optional[str]:
        """Trim surrounding whitespace; no other change."""
        if value is None:
            return None
        return value.strip()


# Module-level aliases: one function per logical field
normalize_patient_id = FieldNormalizer.normalize_patient_id
normalize_name = FieldNormalizer.normalize_name
normalize_gender = FieldNormalizer.normalize_gender
normalize_vital_type = FieldNormalizer.normalize_vital_type
normalize_lab_test = FieldNormalizer.normalize_lab_test
normalize_date_of_birth = FieldNormalizer.normalize_date_of_birth
normalize_timestamp = FieldNormalizer.normalize_timestamp
normalize_phone = FieldNormalizer.normalize_phone
normalize_free_text = FieldNormalizer.normalize_free_text
