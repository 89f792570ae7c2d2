# trimmer/calculator.py
# Seconds → byte-range arithmetic for a single cut.

from dataclasses import dataclass

from trimmer.errors import TrimRangeError
from trimmer.wav_header import HEADER_SIZE, WaveHeader


@dataclass(frozen=True)
class TrimPlan:
    """Corrected output header plus the source byte range to copy."""
    header: WaveHeader
    copy_start: int
    copy_size: int
    cut_front: int
    cut_end: int

    @property
    def bytes_cut(self) -> int:
        return self.cut_front + self.cut_end


def seconds_to_bytes(seconds: float, byte_rate: int, frame_size: int) -> int:
    """
    Convert a duration to a byte count on a whole sample-frame boundary.

    Rounds to the nearest frame (Python round, ties to even) so that the
    same instant always maps to the same byte on both ends of a cut.
    """
    frame: int = frame_size if frame_size > 0 else 1
    return round(byte_rate * seconds / frame) * frame


def plan_trim(
    header: WaveHeader,
    data_offset: int,
    start_sec: float,
    end_sec: float,
) -> TrimPlan:
    """
    Compute the new header and copy range for the window [start_sec, end_sec].

    Raises:
        TrimRangeError: Window starts before 0, ends after the source, or
                        leaves nothing to copy.
    """
    duration: float = header.duration

    if end_sec > duration:
        raise TrimRangeError(
            f"Cut end {end_sec:.3f}s is beyond source duration {duration:.3f}s.\n"
            f"    → Check the end time or the end offset."
        )
    if start_sec < 0:
        raise TrimRangeError(
            f"Cut start {start_sec:.3f}s is before the beginning of the source.\n"
            f"    → Check the start time or the start offset."
        )

    # Both ends go through the same mapping, so one instant is one byte
    cut_front: int = seconds_to_bytes(start_sec, header.byte_rate, header.frame_size)
    end_byte: int = min(
        seconds_to_bytes(end_sec, header.byte_rate, header.frame_size),
        header.data_size,
    )
    cut_end: int = header.data_size - end_byte
    total_cut: int = cut_front + cut_end
    if total_cut >= header.data_size:
        raise TrimRangeError(
            f"Nothing left to cut: start {start_sec:.3f}s is not before "
            f"end {end_sec:.3f}s.\n"
            f"    → Start must be earlier than end."
        )

    new_size: int = header.data_size - total_cut
    # Only the canonical header and the copied range are written
    out_header: WaveHeader = header.with_data_size(
        data_size=new_size,
        file_size=HEADER_SIZE - 8 + new_size,
    )

    return TrimPlan(
        header=out_header,
        copy_start=data_offset + cut_front,
        copy_size=new_size,
        cut_front=cut_front,
        cut_end=cut_end,
    )
