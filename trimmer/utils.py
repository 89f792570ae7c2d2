import os


# Output name prefixes for the two halves in split mode
SPLIT_PREFIXES: tuple[str, str] = ("a_", "b_")

# Process exit codes
EXIT_SUCCESS: int = 0
EXIT_JOBS_FAILED: int = 1
EXIT_NO_JOB_FILE: int = 3
EXIT_INTERRUPTED: int = 130

# Default parameters
DEFAULT_PARAMS: dict[str, float] = {
    "workers": 10,
    "queue_size": 20,
    "max_output_bytes": 5_000_000,
    "offset_start": 0.0,
    "offset_end": 0.0,
}

# Validation helpers
def validate_job_file(path: str) -> None:
    """Raise FileNotFoundError / ValueError if the job file path is invalid."""
    if not path or not os.path.exists(path):
        raise FileNotFoundError(
            f"Job file not found: '{path}'.\n" f"    → Pass an existing CSV with --csv."
        )
    if not os.path.isfile(path):
        raise ValueError(
            f"Job file path is not a file: '{path}'.\n"
            f"    → Provide a path to a CSV file, not a directory."
        )


def validate_directory(path: str, name: str) -> None:
    """Raise FileNotFoundError if a configured directory does not exist."""
    if path and not os.path.isdir(path):
        raise FileNotFoundError(
            f"{name} directory does not exist: '{path}'.\n"
            f"    → Create the directory first, or choose an existing path."
        )


def validate_param_range(
    value: float, name: str, min_val: float, max_val: float
) -> None:
    """Raise ValueError if a numeric parameter is out of its valid range."""
    if not (min_val <= value <= max_val):
        raise ValueError(
            f"Parameter '{name}' must be between {min_val} and {max_val}. Got: {value}.\n"
            f"    → Adjust the value to be within the valid range."
        )

# Path helpers

def get_source_path(source_dir: str, source_file: str) -> str:
    """Join a job's source file name onto the configured source directory."""
    return os.path.join(source_dir, source_file)


def get_output_path(dest_dir: str, out_file: str, prefix: str = "") -> str:
    """
    Build a destination path, optionally prefixing the file name.

    Example: 'out', 'clip.wav', prefix='a_'  →  out/a_clip.wav
    """
    return os.path.join(dest_dir, f"{prefix}{out_file}")
