# application/dto/config_dto.py
# Immutable run configuration, built once by the CLI and passed explicitly.

from dataclasses import dataclass, field
from typing import Optional

from trimmer.utils import DEFAULT_PARAMS
from trimmer.wav_header import DEFAULT_SCAN_LIMIT


@dataclass(frozen=True)
class ColumnLayout:
    """Zero-based CSV column positions of each job field."""
    source_file: int = 0
    start: int = 1
    end: int = 2
    out_file: int = 3
    diff_error: int = 4
    ratio_error: int = 5

    @property
    def required_width(self) -> int:
        return max(self.source_file, self.start, self.end, self.out_file) + 1


@dataclass(frozen=True)
class TrimConfig:
    """Everything a batch run needs; thresholds of None are disabled."""
    source_dir: str = ""
    dest_dir: str = ""
    max_diff_error: Optional[float] = None
    max_ratio_error: Optional[float] = None
    offset_start: float = 0.0
    offset_end: float = 0.0
    delete_diff_error: Optional[float] = None
    delete_ratio_error: Optional[float] = None
    verbose: bool = False
    split_in_half: bool = False
    columns: ColumnLayout = field(default_factory=ColumnLayout)
    workers: int = int(DEFAULT_PARAMS["workers"])
    max_output_bytes: int = int(DEFAULT_PARAMS["max_output_bytes"])
    queue_size: int = int(DEFAULT_PARAMS["queue_size"])
    scan_limit: int = DEFAULT_SCAN_LIMIT

    @property
    def deletion_enabled(self) -> bool:
        return self.delete_diff_error is not None and self.delete_ratio_error is not None
