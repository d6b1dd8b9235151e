"""Enrollment split pipeline orchestration.

Runs one input through parse → partition → dedup → sort and returns the
ordered per-carrier record lists for the writer. Malformed records are
collected and returned, never dropped silently; the run fails only when no
valid record remains.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from src.errors import EmptyInputError, MalformedRecordError
from src.ordering import sort_records
from src.partition import partition_by_carrier
from src.records import EnrollmentRecord, HeaderMode, parse_lines
from src.survivorship import DedupStats, deduplicate_with_stats
from src.utils.parallel_utils import parallel_map

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of one pipeline run.

    Attributes:
        outputs: Carrier -> records in output order, carriers sorted
        errors: Malformed records skipped during the run, in input order
        carrier_stats: Carrier -> dedup counts
        lines_read: Non-blank input lines seen (0 when run from records)

    """

    outputs: dict[str, list[EnrollmentRecord]]
    errors: list[MalformedRecordError] = field(default_factory=list)
    carrier_stats: dict[str, DedupStats] = field(default_factory=dict)
    lines_read: int = 0

    @property
    def valid_records(self) -> int:
        return sum(stats.candidates for stats in self.carrier_stats.values())

    @property
    def duplicates_removed(self) -> int:
        return sum(stats.duplicates_removed for stats in self.carrier_stats.values())

    @property
    def records_written(self) -> int:
        return sum(len(records) for records in self.outputs.values())


def resolve_bucket(
    bucket: Sequence[EnrollmentRecord],
) -> tuple[list[EnrollmentRecord], DedupStats]:
    """Deduplicate one carrier bucket and put the survivors in output order."""
    survivors, stats = deduplicate_with_stats(bucket)
    return sort_records(survivors), stats


def process(
    records: Iterable[EnrollmentRecord],
    workers: int = 1,
    backend: str = "threading",
    source: str = "<records>",
    prior_errors: Sequence[MalformedRecordError] = (),
) -> PipelineResult:
    """Partition, deduplicate and order a full record set.

    Args:
        records: Enrollment records in input order
        workers: Worker count for per-carrier resolution (1 = sequential)
        backend: joblib backend for parallel resolution
        source: Input name used in error messages
        prior_errors: Errors already collected upstream (e.g. by the parser)

    Returns:
        PipelineResult with ordered per-carrier outputs

    Raises:
        EmptyInputError: If no valid record remains

    """
    buckets, partition_errors = partition_by_carrier(records)
    errors = list(prior_errors) + partition_errors

    for error in partition_errors:
        logger.warning(f"Skipping malformed record ({error.reference}): {error.reason}")

    if not buckets:
        raise EmptyInputError(source, errors)

    carriers = sorted(buckets)
    resolved = parallel_map(
        resolve_bucket,
        [buckets[carrier] for carrier in carriers],
        workers=workers,
        backend=backend,
    )

    outputs: dict[str, list[EnrollmentRecord]] = {}
    carrier_stats: dict[str, DedupStats] = {}
    for carrier, (ordered, stats) in zip(carriers, resolved):
        outputs[carrier] = ordered
        carrier_stats[carrier] = stats
        logger.debug(
            f"carrier_resolved | carrier={carrier} | candidates={stats.candidates} "
            f"| survivors={stats.survivors} | duplicates_removed={stats.duplicates_removed}",
        )

    return PipelineResult(outputs=outputs, errors=errors, carrier_stats=carrier_stats)


def process_lines(
    lines: Iterable[str],
    delimiter: str = ",",
    skip_header: HeaderMode = "auto",
    workers: int = 1,
    backend: str = "threading",
    source: str = "<lines>",
) -> PipelineResult:
    """Parse raw lines and run the full pipeline over them.

    Args:
        lines: Raw input lines
        delimiter: Field delimiter
        skip_header: Header handling ("auto", True or False)
        workers: Worker count for per-carrier resolution
        backend: joblib backend for parallel resolution
        source: Input name used in log and error messages

    Returns:
        PipelineResult; parse errors precede partition errors

    Raises:
        EmptyInputError: If no valid record remains

    """
    line_list = list(lines)
    records, parse_errors = parse_lines(line_list, delimiter=delimiter, skip_header=skip_header)

    for error in parse_errors:
        logger.warning(f"Skipping malformed record in {source} ({error.reference}): {error.reason}")

    result = process(
        records,
        workers=workers,
        backend=backend,
        source=source,
        prior_errors=parse_errors,
    )
    result.lines_read = sum(1 for line in line_list if line.strip())
    return result
