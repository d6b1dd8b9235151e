"""Enrollment record model and raw line parsing.

This module handles:
- The immutable EnrollmentRecord entity
- Splitting raw input lines into the 5 enrollment fields
- Field validation (integer version, non-empty carrier)
- Header row detection
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Union

from src.errors import MalformedRecordError

logger = logging.getLogger(__name__)

# Column order of the input and output files
IDENTITY_ID = "identity_id"
FIRST_NAME = "first_name"
LAST_NAME = "last_name"
VERSION = "version"
CARRIER = "carrier"

FIELD_NAMES = [IDENTITY_ID, FIRST_NAME, LAST_NAME, VERSION, CARRIER]
FIELD_COUNT = len(FIELD_NAMES)

HeaderMode = Union[bool, str]


@dataclass(frozen=True)
class EnrollmentRecord:
    """One enrollee submission for one carrier.

    Attributes:
        identity_id: Stable enrollee identifier
        first_name: Enrollee first name
        last_name: Enrollee last name
        version: Non-negative recency counter, higher is newer
        carrier: Insurance company the enrollment belongs to
        source_line: 1-based input line the record was parsed from (not part of
            equality or ordering)

    """

    identity_id: str
    first_name: str
    last_name: str
    version: int
    carrier: str
    source_line: Optional[int] = field(default=None, compare=False, repr=False)

    @property
    def identity_key(self) -> tuple[str, str]:
        return (self.identity_id, self.carrier)

    def to_fields(self) -> list[str]:
        """Return the record in its 5-field serialized form."""
        return [
            self.identity_id,
            self.first_name,
            self.last_name,
            str(self.version),
            self.carrier,
        ]


def _parse_version(value: str, line_number: Optional[int], raw: str, identity_id: str) -> int:
    # ASCII digits only, with an optional leading minus
    digits = value[1:] if value.startswith("-") else value
    if not (digits.isascii() and digits.isdigit()):
        raise MalformedRecordError(
            f"version {value!r} is not an integer",
            line_number=line_number,
            identity_id=identity_id or None,
            raw=raw,
        )
    version = int(value, 10)
    if version < 0:
        raise MalformedRecordError(
            f"version {version} is negative",
            line_number=line_number,
            identity_id=identity_id or None,
            raw=raw,
        )
    return version


def parse_line(
    line: str,
    line_number: Optional[int] = None,
    delimiter: str = ",",
) -> EnrollmentRecord:
    """Parse one raw input line into an EnrollmentRecord.

    Args:
        line: Raw input line (trailing newline allowed)
        line_number: 1-based line number used for error reporting
        delimiter: Field delimiter

    Returns:
        A new EnrollmentRecord

    Raises:
        MalformedRecordError: If the line does not hold exactly 5 fields, the
            version is not a non-negative integer, or the carrier is empty

    """
    raw = line.rstrip("\r\n")
    parts = [part.strip() for part in raw.split(delimiter)]
    if len(parts) != FIELD_COUNT:
        raise MalformedRecordError(
            f"expected {FIELD_COUNT} fields, found {len(parts)}",
            line_number=line_number,
            raw=raw,
        )

    identity_id, first_name, last_name, version_text, carrier = parts
    version = _parse_version(version_text, line_number, raw, identity_id)
    if not carrier:
        raise MalformedRecordError(
            "carrier is empty",
            line_number=line_number,
            identity_id=identity_id or None,
            raw=raw,
        )

    return EnrollmentRecord(
        identity_id=identity_id,
        first_name=first_name,
        last_name=last_name,
        version=version,
        carrier=carrier,
        source_line=line_number,
    )


def _normalize_header_token(token: str) -> str:
    return token.strip().lower().replace(" ", "").replace("_", "")


def looks_like_header(line: str, delimiter: str = ",") -> bool:
    """Return True when the line is a column header rather than data."""
    parts = line.rstrip("\r\n").split(delimiter)
    if len(parts) != FIELD_COUNT:
        return False
    return _normalize_header_token(parts[3]) == VERSION


def parse_lines(
    lines: Iterable[str],
    delimiter: str = ",",
    skip_header: HeaderMode = "auto",
) -> tuple[list[EnrollmentRecord], list[MalformedRecordError]]:
    """Parse raw lines, collecting malformed lines instead of aborting.

    Blank lines are ignored. Each remaining line produces either one record or
    one error.

    Args:
        lines: Raw input lines
        delimiter: Field delimiter
        skip_header: "auto" to skip a detected header row, True to always skip
            the first non-blank line, False to never skip

    Returns:
        Tuple of (records in input order, errors in input order)

    """
    if skip_header not in ("auto", True, False):
        raise ValueError(f"skip_header must be 'auto', True or False, got {skip_header!r}")

    records: list[EnrollmentRecord] = []
    errors: list[MalformedRecordError] = []
    first_data_line = True

    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        if first_data_line:
            first_data_line = False
            if skip_header is True or (
                skip_header == "auto" and looks_like_header(line, delimiter)
            ):
                logger.debug(f"Skipping header row at line {line_number}")
                continue

        try:
            records.append(parse_line(line, line_number, delimiter))
        except MalformedRecordError as e:
            errors.append(e)

    return records, errors
