"""Utility modules for the enrollment split pipeline.
"""

from .io_utils import (
    carrier_filename,
    load_settings,
    read_input_lines,
    reload_settings,
    validate_settings,
    write_carrier_file,
    write_carrier_outputs,
)
from .logging_utils import get_logger, setup_logging, time_stage
from .parallel_utils import parallel_map, resolve_workers
from .path_utils import ensure_directory_exists, get_config_path, get_project_root

__all__ = [
    # Logging utilities
    "setup_logging",
    "get_logger",
    "time_stage",
    # Path utilities
    "get_project_root",
    "get_config_path",
    "ensure_directory_exists",
    # I/O utilities
    "load_settings",
    "reload_settings",
    "validate_settings",
    "read_input_lines",
    "carrier_filename",
    "write_carrier_file",
    "write_carrier_outputs",
    # Parallel utilities
    "parallel_map",
    "resolve_workers",
]
