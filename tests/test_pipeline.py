"""Tests for src.pipeline orchestration."""

import pytest

from src.errors import EmptyInputError
from src.pipeline import process, process_lines, resolve_bucket
from src.records import EnrollmentRecord


def _ids(records: list[EnrollmentRecord]) -> list[str]:
    return [r.identity_id for r in records]


def test_example_scenario(sample_lines: list[str]) -> None:
    """Test the reference scenario: one superseded record, two carriers."""
    result = process_lines(sample_lines)

    assert list(result.outputs) == ["Acme", "Globex"]
    acme = result.outputs["Acme"]
    assert [(r.identity_id, r.first_name, r.version) for r in acme] == [
        ("U2", "Ann", 1),
        ("U1", "John", 2),
    ]
    assert _ids(result.outputs["Globex"]) == ["U3"]
    assert result.errors == []
    assert result.duplicates_removed == 1
    assert result.carrier_stats["Acme"].duplicates_removed == 1
    assert result.carrier_stats["Globex"].duplicates_removed == 0
    assert result.lines_read == 4
    assert result.valid_records == 4
    assert result.records_written == 3


def test_dedup_is_scoped_per_carrier() -> None:
    """Test that one identity under two carriers survives in both.

    Records are grouped by carrier before dedup, so the same enrollee is kept
    once per carrier rather than once globally.
    """
    result = process_lines(["U1,John,Smith,1,Acme", "U1,John,Smith,5,Globex"])

    assert result.outputs["Acme"][0].version == 1
    assert result.outputs["Globex"][0].version == 5
    assert result.duplicates_removed == 0


def test_malformed_lines_are_isolated() -> None:
    """Test that malformed lines are reported and valid lines still processed."""
    lines = [
        "U1,John,Smith,1,Acme",
        "U2,Ann,Smith,one,Acme",
        "U3,Bo,Lee,1,",
        "too,few",
        "U4,Cy,Ng,2,Globex",
    ]

    result = process_lines(lines)

    assert _ids(result.outputs["Acme"]) == ["U1"]
    assert _ids(result.outputs["Globex"]) == ["U4"]
    assert [e.line_number for e in result.errors] == [2, 3, 4]


def test_partition_errors_follow_parse_errors() -> None:
    """Test that errors from records without a carrier are also collected."""
    records = [
        EnrollmentRecord("U1", "John", "Smith", 1, "Acme"),
        EnrollmentRecord("U2", "Ann", "Smith", 1, ""),
    ]

    result = process(records)

    assert _ids(result.outputs["Acme"]) == ["U1"]
    assert len(result.errors) == 1
    assert result.errors[0].identity_id == "U2"


def test_all_malformed_raises_empty_input() -> None:
    """Test that a run with no valid records fails and carries its errors."""
    with pytest.raises(EmptyInputError) as exc_info:
        process_lines(["bad", "U1,John,Smith,x,Acme"], source="broken.csv")

    assert exc_info.value.source == "broken.csv"
    assert len(exc_info.value.errors) == 2


def test_empty_input_raises() -> None:
    """Test that an input without records fails."""
    with pytest.raises(EmptyInputError):
        process([])
    with pytest.raises(EmptyInputError):
        process_lines(["", "   "])


def test_header_only_input_raises() -> None:
    """Test that a file holding only a header has no valid records."""
    with pytest.raises(EmptyInputError) as exc_info:
        process_lines(["User Id,First Name,Last Name,Version,Insurance Company"])

    assert exc_info.value.errors == []


def test_blank_lines_keep_line_numbers() -> None:
    """Test that error line numbers refer to the original file lines."""
    result = process_lines(["U1,John,Smith,1,Acme", "", "", "bad"])

    assert result.errors[0].line_number == 4
    assert result.lines_read == 2


def test_output_is_deterministic(sample_lines: list[str]) -> None:
    """Test that identical input yields identical output."""
    first = process_lines(sample_lines)
    second = process_lines(list(sample_lines))

    assert first.outputs == second.outputs
    assert list(first.outputs) == list(second.outputs)


@pytest.mark.parametrize("backend", ["threading", "loky"])
def test_parallel_matches_sequential(backend: str) -> None:
    """Test that parallel per-carrier resolution gives the sequential result."""
    lines = [
        f"U{i % 7},First{i % 3},Last{i % 5},{i % 4},Carrier{i % 4}"
        for i in range(60)
    ]

    sequential = process_lines(lines, workers=1)
    parallel = process_lines(lines, workers=4, backend=backend)

    assert parallel.outputs == sequential.outputs
    assert list(parallel.outputs) == list(sequential.outputs)
    assert parallel.carrier_stats == sequential.carrier_stats


def test_resolve_bucket_dedups_then_sorts() -> None:
    """Test resolve_bucket on one carrier's candidates."""
    bucket = [
        EnrollmentRecord("U1", "John", "Smith", 1, "Acme"),
        EnrollmentRecord("U2", "Ann", "Adams", 1, "Acme"),
        EnrollmentRecord("U1", "John", "Smith", 3, "Acme"),
    ]

    ordered, stats = resolve_bucket(bucket)

    assert _ids(ordered) == ["U2", "U1"]
    assert ordered[1].version == 3
    assert stats.duplicates_removed == 1
