"""Canonical label enumerations for normalized clinical fields.

Each enum is a ``str`` enum so members compare equal to their canonical
label (``Gender.MALE == "M"``) and serialize as plain text.
"""

from enum import Enum


class Gender(str, Enum):
    """Canonical patient gender labels."""
    MALE = "M"
    FEMALE = "F"
    UNKNOWN = "Unknown"


class VitalType(str, Enum):
    """Canonical vital-sign type labels."""
    TEMPERATURE = "Temperature"
    HEART_RATE = "Heart Rate"
    BLOOD_PRESSURE = "Blood Pressure"
    UNKNOWN = "Unknown"


class LabTest(str, Enum):
    """Canonical laboratory test labels."""
    WBC = "WBC"
    HGB = "Hgb"
    CREATININE = "Creatinine"
    UNKNOWN = "Unknown"
