# application/dto/batch_dto.py
# Data Transfer Objects for trim jobs, cut requests and batch results.

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from application.dto.config_dto import ColumnLayout
from trimmer.errors import JobParseError


def _parse_float(row: Sequence[str], index: int, name: str) -> float:
    try:
        value = float(row[index])
    except (IndexError, ValueError):
        raw = row[index] if index < len(row) else "<missing>"
        raise JobParseError(
            f"Cannot parse {name} from column {index}: {raw!r}."
        ) from None
    if not math.isfinite(value):
        raise JobParseError(f"{name.capitalize()} in column {index} is not a finite number.")
    return value


def _optional_float(row: Sequence[str], index: int, name: str) -> Optional[float]:
    # Present only if the row is wide enough and the cell is not blank
    if index >= len(row) or not row[index].strip():
        return None
    return _parse_float(row, index, name)


@dataclass
class JobRecordDTO:
    """One row of the job file."""
    source_file: str
    start_sec: float
    end_sec: float
    out_file: str
    diff_error: Optional[float] = None
    ratio: Optional[float] = None

    @property
    def ratio_error(self) -> Optional[float]:
        if self.ratio is None:
            return None
        return abs(1.0 - self.ratio)

    @classmethod
    def from_row(cls, row: Sequence[str], columns: ColumnLayout) -> "JobRecordDTO":
        """Raise JobParseError if a required field is missing or malformed."""
        if len(row) < columns.required_width:
            raise JobParseError(
                f"Row has {len(row)} columns, need at least {columns.required_width}."
            )
        source_file: str = row[columns.source_file].strip()
        out_file: str = row[columns.out_file].strip()
        if not source_file or not out_file:
            raise JobParseError("Row has an empty source or output file name.")
        return cls(
            source_file=source_file,
            start_sec=_parse_float(row, columns.start, "start"),
            end_sec=_parse_float(row, columns.end, "end"),
            out_file=out_file,
            diff_error=_optional_float(row, columns.diff_error, "diff error"),
            ratio=_optional_float(row, columns.ratio_error, "ratio"),
        )


@dataclass
class TrimRequestDTO:
    """Single cut request; times already include the global offsets."""
    source_path: str
    dest_path: str
    start_sec: float
    end_sec: float


@dataclass
class CutResultDTO:
    """Outcome of one cut."""
    request: TrimRequestDTO
    data_size: int = 0
    bytes_cut: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class JobResultDTO:
    """Outcome of one job record."""
    line_no: int
    source_file: str = ""
    status: str = "queued"       # queued | skipped | invalid | failed | done
    cuts: List[CutResultDTO] = field(default_factory=list)
    deleted: bool = False
    error: Optional[str] = None


@dataclass
class BatchResultDTO:
    """Summary of a whole batch run."""
    results: List[JobResultDTO] = field(default_factory=list)
    total: int = 0
    done: int = 0
    skipped: int = 0
    invalid: int = 0
    failed: int = 0
    deleted: int = 0

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or self.invalid > 0
