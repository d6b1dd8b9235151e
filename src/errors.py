"""Exception taxonomy for the enrollment split pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class EnrollmentSplitError(Exception):
    """Base class for pipeline errors."""


class MalformedRecordError(EnrollmentSplitError):
    """A single input record could not be turned into a valid enrollment.

    Recovered locally: the record is skipped and the error is collected so the
    caller can report it.

    Attributes:
        reason: Human readable reason the record was rejected
        line_number: 1-based input line number, when the record came from a file
        identity_id: Identity of the rejected record, when it could be read
        raw: Raw input line, when available

    """

    def __init__(
        self,
        reason: str,
        line_number: Optional[int] = None,
        identity_id: Optional[str] = None,
        raw: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.line_number = line_number
        self.identity_id = identity_id
        self.raw = raw
        super().__init__(f"{self.reference}: {reason}")

    @property
    def reference(self) -> str:
        if self.line_number is not None:
            return f"line {self.line_number}"
        if self.identity_id:
            return f"identity {self.identity_id}"
        return "record"


class EmptyInputError(EnrollmentSplitError):
    """No valid records remained for an input source."""

    def __init__(
        self,
        source: str,
        errors: Optional[Sequence[MalformedRecordError]] = None,
    ) -> None:
        self.source = source
        self.errors = list(errors or [])
        super().__init__(
            f"No valid enrollment records in {source} "
            f"({len(self.errors)} malformed)",
        )


class OutputCollisionError(EnrollmentSplitError):
    """Two carriers resolve to the same output file name."""
