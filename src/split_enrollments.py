"""Command line entry point: split enrollment files into per-carrier files.

Usage:
    python -m src.split_enrollments enrollments.csv [more.csv ...] --outdir out/

Each input runs the full pipeline on its own and writes one file per carrier
to the output directory, plus a rejects report and a JSON run summary. A
failing input does not stop the others; the exit code is 1 if any input
failed.
"""

import argparse
import copy
import sys
import time
from pathlib import Path
from typing import Any, Optional

from src.errors import EmptyInputError, OutputCollisionError
from src.pipeline import process_lines
from src.reporting import RunSummary, build_run_summary, log_run_summary, save_rejects, save_run_summary
from src.utils.io_utils import (
    deep_merge,
    load_settings,
    read_input_lines,
    validate_settings,
    write_carrier_outputs,
)
from src.utils.logging_utils import get_logger, setup_logging, time_stage
from src.utils.parallel_utils import resolve_workers
from src.utils.path_utils import get_config_path, safe_filename_component

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def run_file(
    input_path: str,
    outdir: str,
    settings: dict[str, Any],
) -> RunSummary:
    """Run the pipeline for one input file and write its outputs.

    Args:
        input_path: Enrollment file to process
        outdir: Directory receiving the carrier files
        settings: Effective settings

    Returns:
        RunSummary for the file

    Raises:
        EmptyInputError: If the file holds no valid record
        OutputCollisionError: If two carriers map to the same file name
        OSError: If reading or writing fails
        UnicodeDecodeError: If the file does not decode with input.encoding

    """
    input_cfg = settings["input"]
    output_cfg = settings["output"]
    parallel_cfg = settings["parallelism"]
    out_path = Path(outdir)
    stem = safe_filename_component(Path(input_path).stem)

    start = time.time()
    logger.info(f"Reading and sorting file {input_path}")

    with time_stage("read", logger):
        lines = read_input_lines(input_path, encoding=input_cfg["encoding"])

    try:
        with time_stage("process", logger):
            result = process_lines(
                lines,
                delimiter=input_cfg["delimiter"],
                skip_header=input_cfg["header"],
                workers=resolve_workers(parallel_cfg["workers"]),
                backend=parallel_cfg["backend"],
                source=input_path,
            )
    except EmptyInputError as e:
        if output_cfg["write_rejects"] and e.errors:
            save_rejects(e.errors, out_path / f"{stem}_rejects.csv")
        raise

    with time_stage("write", logger):
        written = write_carrier_outputs(
            result.outputs,
            out_path,
            pattern=output_cfg["filename_pattern"],
            delimiter=input_cfg["delimiter"],
            write_header=output_cfg["write_header"],
            encoding=input_cfg["encoding"],
        )

    if output_cfg["write_rejects"] and result.errors:
        save_rejects(result.errors, out_path / f"{stem}_rejects.csv")

    summary = build_run_summary(input_path, result, written, time.time() - start)
    log_run_summary(summary)
    if output_cfg["write_summary"]:
        save_run_summary(summary, out_path / f"{stem}_summary.json")
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split enrollment files into one deduplicated, sorted file per carrier",
    )
    parser.add_argument("inputs", nargs="+", help="Enrollment CSV file path(s)")
    parser.add_argument(
        "--outdir",
        default=".",
        help="Output directory for carrier files (default: current directory)",
    )
    parser.add_argument(
        "--config",
        default=str(get_config_path()),
        help="Configuration file path",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of parallel workers for per-carrier processing",
    )
    parser.add_argument(
        "--no-parallel",
        action="store_true",
        help="Force sequential execution (disables parallel processing)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )
    return parser


def effective_settings(args: argparse.Namespace) -> dict[str, Any]:
    """Merge CLI overrides over the loaded settings."""
    settings = copy.deepcopy(load_settings(args.config))
    overrides: dict[str, Any] = {}
    if args.workers is not None:
        overrides.setdefault("parallelism", {})["workers"] = args.workers
    if args.no_parallel:
        overrides.setdefault("parallelism", {})["workers"] = 1
    if args.log_level:
        overrides.setdefault("logging", {})["level"] = args.log_level
    return deep_merge(settings, overrides)


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = effective_settings(args)

    log_cfg = settings["logging"]
    setup_logging(log_cfg["level"], log_cfg["format"], log_cfg.get("file"))

    problems = validate_settings(settings)
    if problems:
        for problem in problems:
            logger.error(f"Invalid setting: {problem}")
        return EXIT_FAILED

    failures = 0
    for input_path in args.inputs:
        try:
            run_file(input_path, args.outdir, settings)
        except EmptyInputError as e:
            failures += 1
            logger.error(str(e))
        except OutputCollisionError as e:
            failures += 1
            logger.error(f"Cannot write outputs for {input_path}: {e}")
        except UnicodeDecodeError as e:
            failures += 1
            logger.error(f"Cannot decode {input_path} as {settings['input']['encoding']}: {e}")
        except OSError as e:
            failures += 1
            logger.error(f"I/O failure processing {input_path}: {e}")

    if failures:
        logger.error(f"{failures} of {len(args.inputs)} input file(s) failed")
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.warning("Run interrupted by user (Ctrl+C)")
        sys.exit(130)  # Standard exit code for interrupt
