"""Deduplicator - Collapse clean records to one per patient.

Groups CleanRecords by canonical patient identifier and keeps exactly one
record per group: the one with the earliest admission time. Records without
an admission time never win over a record that has one, and ties are broken
by input order (first seen wins).

Architecture:
    - Pure domain logic with no infrastructure dependencies
    - Single synchronous reduction over the full batch
"""

import logging
from collections import Counter
from typing import Iterable, Optional, Sequence

from src.domain.golden_record import CanonicalDataset, CleanRecord

logger = logging.getLogger(__name__)


class Deduplicator:
    """Select one CleanRecord per patient_id.

    Example Usage:
        ```python
        dataset = Deduplicator().deduplicate(clean_records)
        record = dataset.get("P-0042")
        ```
    """

    @staticmethod
    def _supersedes(candidate: CleanRecord, current: CleanRecord) -> bool:
        """Return True if candidate should replace the currently kept record.

        Only a strictly earlier admission time replaces the current record,
        so equal timestamps (and two absent timestamps) keep the first seen.
        """
        if candidate.admission_time is None:
            return False
        if current.admission_time is None:
            return True
        return candidate.admission_time < current.admission_time

    def deduplicate(self, records: Iterable[CleanRecord]) -> CanonicalDataset:
        """Reduce a batch of clean records to a CanonicalDataset.

        Parameters:
            records: Clean records in original input order

        Returns:
            CanonicalDataset: One record per distinct patient_id, ordered by
            first appearance of each patient_id
        """
        kept: dict[str, CleanRecord] = {}
        records_in = 0

        for record in records:
            records_in += 1
            current: Optional[CleanRecord] = kept.get(record.patient_id)
            if current is None:
                kept[record.patient_id] = record
            elif self._supersedes(record, current):
                logger.debug(f"Record #{records_in} supersedes earlier record for {record.patient_id}")
                kept[record.patient_id] = record
            else:
                logger.debug(f"Record #{records_in} dropped as duplicate of {record.patient_id}")

        logger.info(
            f"Deduplication complete: {records_in} records in, {len(kept)} records out "
            f"({records_in - len(kept)} duplicates removed)"
        )
        return CanonicalDataset(records=kept)

    @staticmethod
    def find_duplicates(records: Sequence[CleanRecord]) -> dict[str, int]:
        """Count records per patient_id, keeping only ids seen more than once.

        Returns:
            dict: patient_id to record count, in first-seen order
        """
        counts = Counter(record.patient_id for record in records)
        return {patient_id: count for patient_id, count in counts.items() if count > 1}
