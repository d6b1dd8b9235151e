"""Output ordering policy for enrollment records.

Records sort by last name, then first name, then identity, then version. Every
field compares case-sensitively by code point. The identity and version fields
make the order total, so records sharing a full name still sort the same way on
every run regardless of input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cmp_to_key
from typing import Any

from src.records import EnrollmentRecord


def _three_way(left: Any, right: Any) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def compare_records(a: EnrollmentRecord, b: EnrollmentRecord) -> int:
    """Three-way comparison of two records.

    Args:
        a: Left record
        b: Right record

    Returns:
        Negative if a sorts first, positive if b sorts first, 0 if equal

    """
    for left, right in (
        (a.last_name, b.last_name),
        (a.first_name, b.first_name),
        (a.identity_id, b.identity_id),
        (a.version, b.version),
    ):
        result = _three_way(left, right)
        if result != 0:
            return result
    return 0


def record_sort_key(record: EnrollmentRecord) -> tuple[str, str, str, int]:
    """Tuple key equivalent to compare_records."""
    return (record.last_name, record.first_name, record.identity_id, record.version)


def sort_records(records: Iterable[EnrollmentRecord]) -> list[EnrollmentRecord]:
    """Return a new list ordered by the output policy."""
    return sorted(records, key=cmp_to_key(compare_records))
