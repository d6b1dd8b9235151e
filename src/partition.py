"""Carrier partitioning of enrollment records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from src.errors import MalformedRecordError
from src.records import EnrollmentRecord

logger = logging.getLogger(__name__)


def partition_by_carrier(
    records: Iterable[EnrollmentRecord],
) -> tuple[dict[str, list[EnrollmentRecord]], list[MalformedRecordError]]:
    """Group records into per-carrier buckets.

    Buckets are created on the first record seen for a carrier and keep input
    order. Records without a carrier are rejected and reported, never placed in
    a bucket.

    Args:
        records: Enrollment records in input order

    Returns:
        Tuple of (carrier -> candidate records, rejected record errors)

    """
    buckets: dict[str, list[EnrollmentRecord]] = {}
    errors: list[MalformedRecordError] = []

    for record in records:
        carrier = record.carrier
        if carrier is None or not str(carrier).strip():
            errors.append(
                MalformedRecordError(
                    "carrier is empty",
                    line_number=record.source_line,
                    identity_id=record.identity_id or None,
                ),
            )
            continue
        buckets.setdefault(carrier, []).append(record)

    logger.debug(
        f"partition | carriers={len(buckets)} | rejected={len(errors)}",
    )
    return buckets, errors
