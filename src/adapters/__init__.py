"""Adapters layer for Clinical-Normalizer.

This module contains input/output adapters that interface with external systems.
Adapters implement Port interfaces defined in the domain layer and handle
reading external formats into raw domain records.
"""

