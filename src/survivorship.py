"""Survivorship for duplicate enrollment submissions.

This module handles:
- Collapsing records that share an identity within a carrier
- Highest-version selection with last-write-wins on version ties
- Per-carrier duplicate statistics

Selection is keyed strictly by identity. Ordering is a separate pass (see
src.ordering), so two different enrollees who share a name are never collapsed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.records import EnrollmentRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DedupStats:
    """Counts for one carrier bucket.

    Attributes:
        candidates: Records in the bucket before dedup
        survivors: Records left after dedup

    """

    candidates: int
    survivors: int

    @property
    def duplicates_removed(self) -> int:
        return self.candidates - self.survivors

    def to_dict(self) -> dict[str, int]:
        return {
            "candidates": self.candidates,
            "survivors": self.survivors,
            "duplicates_removed": self.duplicates_removed,
        }


def _supersedes(candidate: EnrollmentRecord, current: EnrollmentRecord) -> bool:
    # Later record wins on an equal version
    return candidate.version >= current.version


def deduplicate_with_stats(
    candidates: Iterable[EnrollmentRecord],
) -> tuple[list[EnrollmentRecord], DedupStats]:
    """Keep one record per identity: the highest version, latest on ties.

    Args:
        candidates: One carrier's records, in input order

    Returns:
        Tuple of (surviving records in first-seen identity order, stats)

    """
    survivors: dict[tuple[str, str], EnrollmentRecord] = {}
    total = 0

    for record in candidates:
        total += 1
        key = record.identity_key
        current = survivors.get(key)
        if current is None:
            survivors[key] = record
            continue

        if _supersedes(record, current):
            logger.debug(
                f"superseded | identity={record.identity_id} | carrier={record.carrier} "
                f"| kept_version={record.version} | dropped_version={current.version}",
            )
            survivors[key] = record
        else:
            logger.debug(
                f"superseded | identity={record.identity_id} | carrier={record.carrier} "
                f"| kept_version={current.version} | dropped_version={record.version}",
            )

    result = list(survivors.values())
    return result, DedupStats(candidates=total, survivors=len(result))


def deduplicate(candidates: Iterable[EnrollmentRecord]) -> list[EnrollmentRecord]:
    """Return the surviving record for each identity in the bucket."""
    survivors, _ = deduplicate_with_stats(candidates)
    return survivors
