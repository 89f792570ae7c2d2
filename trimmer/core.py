import logging
import os
import stat
import tempfile
from typing import Optional

import numpy as np

from application.dto.batch_dto import CutResultDTO, TrimRequestDTO
from trimmer.calculator import TrimPlan, plan_trim
from trimmer.errors import ResourceLimitError
from trimmer.wav_header import DEFAULT_SCAN_LIMIT, WaveHeader, read_wave_header

logger = logging.getLogger("wav_trimmer.cut")

# Read once at import; os.umask can only be read by setting it
_UMASK: int = os.umask(0)
os.umask(_UMASK)


def output_mode(dest_path: str) -> int:
    """Mode for a finished cut: the replaced file's mode, else 0666 minus umask."""
    try:
        return stat.S_IMODE(os.stat(dest_path).st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


class ScratchBuffer:
    """
    Reusable per-worker copy buffer.

    Grows to the size a cut needs, never beyond ``limit`` bytes. Owned by a
    single worker thread, so it needs no locking.
    """

    def __init__(self, limit: int) -> None:
        self.limit: int = limit
        self._data: np.ndarray = np.empty(0, dtype=np.uint8)

    @property
    def capacity(self) -> int:
        return int(self._data.size)

    def view(self, size: int) -> memoryview:
        """Return a writable view of exactly *size* bytes."""
        if size > self.limit:
            raise ResourceLimitError(
                f"Output of {size} bytes exceeds the {self.limit} byte cap.\n"
                f"    → Raise --max-output-bytes or cut a shorter window."
            )
        if size > self._data.size:
            self._data = np.empty(size, dtype=np.uint8)
        return memoryview(self._data)[:size]


def cut_wav(
    request          : TrimRequestDTO,
    scratch          : ScratchBuffer,
    max_output_bytes : Optional[int] = None,
    scan_limit       : int = DEFAULT_SCAN_LIMIT,
) -> CutResultDTO:
    """
    Cut one WAVE file: locate data → plan → copy range into a new file.

    The destination is written to a temporary file in the same directory
    and renamed into place only after every byte has been written, so a
    failed cut never leaves a partial file under the destination name.

    Args:
        request:          Source/destination paths and the cut window.
        scratch:          Worker-owned copy buffer.
        max_output_bytes: Output data cap; defaults to the scratch limit.
        scan_limit:       Bound for the "data" chunk search.

    Raises:
        WavFormatError, TrimRangeError, ResourceLimitError, OSError
    """
    limit: int = scratch.limit if max_output_bytes is None else max_output_bytes

    with open(request.source_path, "rb") as src:
        header: WaveHeader
        data_offset: int
        header, data_offset = read_wave_header(src, scan_limit)
        plan: TrimPlan = plan_trim(
            header, data_offset, request.start_sec, request.end_sec
        )

        if plan.copy_size > limit:
            raise ResourceLimitError(
                f"Output of {plan.copy_size} bytes exceeds the {limit} byte cap.\n"
                f"    → Raise --max-output-bytes or cut a shorter window."
            )

        buf: memoryview = scratch.view(plan.copy_size)
        src.seek(plan.copy_start)
        read: int = src.readinto(buf)
        if read != plan.copy_size:
            raise OSError(
                f"Short read from '{request.source_path}': "
                f"expected {plan.copy_size} bytes, got {read or 0}."
            )

    dest_dir: str = os.path.dirname(os.path.abspath(request.dest_path))
    tmp_fd: int
    tmp_path: str
    tmp_fd, tmp_path = tempfile.mkstemp(suffix=".wav.part", dir=dest_dir)
    try:
        with os.fdopen(tmp_fd, "wb") as out:
            out.write(plan.header.pack())
            out.write(buf)
        os.chmod(tmp_path, output_mode(request.dest_path))
        os.replace(tmp_path, request.dest_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    logger.debug(
        "cut %s [%.3f, %.3f] → %s (%d bytes)",
        request.source_path,
        request.start_sec,
        request.end_sec,
        request.dest_path,
        plan.copy_size,
    )
    return CutResultDTO(
        request=request,
        data_size=plan.copy_size,
        bytes_cut=plan.bytes_cut,
    )
