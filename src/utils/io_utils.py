"""IO utilities: settings loading, input reading and carrier file writing."""

import copy
import functools
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Union

import pandas as pd
import yaml

from src.errors import OutputCollisionError
from src.records import FIELD_NAMES, EnrollmentRecord
from src.utils.logging_utils import DEFAULT_FORMAT, get_logger
from src.utils.parallel_utils import SUPPORTED_BACKENDS
from src.utils.path_utils import ensure_directory_exists, safe_filename_component

logger = get_logger(__name__)

PathLike = Union[str, Path]

# Settings loading counter for debugging
_settings_load_count = 0

DEFAULT_SETTINGS: dict[str, Any] = {
    "input": {
        "delimiter": ",",
        "encoding": "utf-8",
        "header": "auto",
    },
    "output": {
        "filename_pattern": "{carrier}.csv",
        "write_header": False,
        "write_rejects": True,
        "write_summary": True,
    },
    "parallelism": {
        "workers": 1,
        "backend": "threading",
    },
    "logging": {
        "level": "INFO",
        "format": DEFAULT_FORMAT,
        "file": None,
    },
}


def deep_merge(base: dict[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    """Merge update into base recursively (base is modified and returned).

    An empty YAML section (None) over a default section keeps the defaults.
    """
    for key, value in update.items():
        if value is None and isinstance(base.get(key), dict):
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


@functools.lru_cache(maxsize=1)
def load_settings(path: str) -> dict[str, Any]:
    """Load settings from YAML file with defaults.

    This function is cached to prevent repeated file I/O and parsing.
    Use reload_settings() to force a fresh load. Callers must copy the result
    before modifying it.

    Args:
        path: Path to settings YAML file

    Returns:
        Dictionary with settings (user config merged over defaults)

    """
    global _settings_load_count
    _settings_load_count += 1

    logger.debug(f"Settings loaded (count: {_settings_load_count}) from {path}")

    defaults = copy.deepcopy(DEFAULT_SETTINGS)
    try:
        with open(path, encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Settings file not found: {path}. Using defaults.")
        return defaults

    if not isinstance(user_config, dict):
        logger.warning(f"Settings file {path} does not hold a mapping. Using defaults.")
        return defaults

    return deep_merge(defaults, user_config)


def reload_settings(path: str) -> dict[str, Any]:
    """Force reload settings from file (clears cache).

    Args:
        path: Path to settings YAML file

    Returns:
        Freshly loaded settings

    """
    load_settings.cache_clear()
    return load_settings(path)


def get_settings_load_count() -> int:
    """Get the total number of times settings have been loaded."""
    return _settings_load_count


def validate_settings(settings: Mapping[str, Any]) -> list[str]:
    """Returns list of validation warnings.

    Args:
        settings: Settings dict to validate

    Returns:
        List of validation warning messages (empty when valid)

    """
    warnings = []

    input_cfg = settings.get("input", {})
    delimiter = input_cfg.get("delimiter", ",")
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        warnings.append(f"input.delimiter must be a single character, got {delimiter!r}")

    header = input_cfg.get("header", "auto")
    if header not in ("auto", True, False):
        warnings.append(f"input.header must be auto, true or false, got {header!r}")

    pattern = settings.get("output", {}).get("filename_pattern", "{carrier}.csv")
    if not isinstance(pattern, str) or "{carrier}" not in pattern:
        warnings.append(f"output.filename_pattern must contain '{{carrier}}', got {pattern!r}")

    parallelism = settings.get("parallelism", {})
    workers = parallelism.get("workers", 1)
    if workers != "auto" and (
        isinstance(workers, bool) or not isinstance(workers, int) or workers < 1
    ):
        warnings.append(f"parallelism.workers must be a positive int or 'auto', got {workers!r}")

    backend = parallelism.get("backend", "threading")
    if backend not in SUPPORTED_BACKENDS:
        warnings.append(
            f"parallelism.backend must be one of {', '.join(SUPPORTED_BACKENDS)}, got {backend!r}",
        )

    level = settings.get("logging", {}).get("level", "INFO")
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        warnings.append(f"logging.level is not a known level, got {level!r}")

    return warnings


def read_input_lines(path: PathLike, encoding: str = "utf-8") -> list[str]:
    """Read an enrollment file as raw lines.

    Args:
        path: Input file path
        encoding: Text encoding

    Returns:
        Lines without trailing newlines

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid text in the encoding

    """
    with open(path, encoding=encoding, newline="") as f:
        return f.read().splitlines()


def carrier_filename(carrier: str, pattern: str = "{carrier}.csv") -> str:
    """Build the deterministic output file name for a carrier."""
    return pattern.format(carrier=safe_filename_component(carrier))


def records_frame(records: Iterable[EnrollmentRecord]) -> pd.DataFrame:
    """Build a DataFrame in the 5-field output column order."""
    rows = [
        (r.identity_id, r.first_name, r.last_name, r.version, r.carrier)
        for r in records
    ]
    return pd.DataFrame.from_records(rows, columns=FIELD_NAMES)


def write_carrier_file(
    records: Iterable[EnrollmentRecord],
    path: PathLike,
    delimiter: str = ",",
    write_header: bool = False,
    encoding: str = "utf-8",
) -> Path:
    """Write one carrier's ordered records atomically.

    The file is written next to its destination under a temporary name and
    moved into place with os.replace, so readers never see a partial file.
    Fields are joined verbatim with the delimiter, without quoting or
    escaping, so each line keeps the 5-field input form.

    Args:
        records: Records in output order
        path: Destination file path
        delimiter: Field delimiter
        write_header: Emit a header row
        encoding: Text encoding

    Returns:
        The destination path

    """
    dest = Path(path)
    ensure_directory_exists(str(dest.parent))
    df = records_frame(records)
    lines = [delimiter.join(row) for row in df.astype(str).itertuples(index=False, name=None)]
    if write_header:
        lines.insert(0, delimiter.join(df.columns))

    fd, tmp_name = tempfile.mkstemp(
        dir=str(dest.parent), prefix=f".{dest.name}.", suffix=".tmp",
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.writelines(f"{line}\n" for line in lines)
        os.replace(tmp_path, dest)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.debug(f"Wrote {len(df)} records to {dest}")
    return dest


def write_carrier_outputs(
    outputs: Mapping[str, list[EnrollmentRecord]],
    outdir: PathLike,
    pattern: str = "{carrier}.csv",
    delimiter: str = ",",
    write_header: bool = False,
    encoding: str = "utf-8",
) -> dict[str, Path]:
    """Write one file per carrier.

    Every file name is resolved before anything is written, so a name collision
    leaves the output directory untouched. A write failure stops at the failing
    carrier; files already written stay intact.

    Args:
        outputs: Carrier -> records in output order
        outdir: Output directory
        pattern: File name pattern holding '{carrier}'
        delimiter: Field delimiter
        write_header: Emit a header row in each file
        encoding: Text encoding

    Returns:
        Carrier -> written file path

    Raises:
        OutputCollisionError: If two carriers resolve to the same file name
        OSError: If a file cannot be written

    """
    targets: dict[str, Path] = {}
    seen: dict[str, str] = {}
    for carrier in outputs:
        name = carrier_filename(carrier, pattern)
        if name in seen:
            raise OutputCollisionError(
                f"Carriers {seen[name]!r} and {carrier!r} both map to output file {name!r}",
            )
        seen[name] = carrier
        targets[carrier] = Path(outdir) / name

    written: dict[str, Path] = {}
    for carrier, target in targets.items():
        written[carrier] = write_carrier_file(
            outputs[carrier],
            target,
            delimiter=delimiter,
            write_header=write_header,
            encoding=encoding,
        )
        logger.info(f"Created {target} ({len(outputs[carrier])} records)")
    return written
