import pytest

from conftest import BYTE_RATE, SAMPLE_RATE
from trimmer.calculator import TrimPlan, plan_trim, seconds_to_bytes
from trimmer.errors import TrimRangeError
from trimmer.wav_header import HEADER_SIZE, WaveHeader


def make_header(duration_s: float = 10.0, frame_size: int = 2) -> WaveHeader:
    data_size: int = int(round(BYTE_RATE * duration_s))
    return WaveHeader(
        riff=b"RIFF",
        file_size=36 + data_size,
        wave=b"WAVE",
        fmt=b"fmt ",
        fmt_len=16,
        audio_format=1,
        channels=1,
        sample_rate=SAMPLE_RATE,
        byte_rate=BYTE_RATE,
        frame_size=frame_size,
        bits_per_sample=16,
        data_tag=b"data",
        data_size=data_size,
    )


class TestSecondsToBytes:
    """Tests for frame-aligned time → byte conversion."""

    def test_whole_seconds(self) -> None:
        assert seconds_to_bytes(2.0, BYTE_RATE, 2) == 2 * BYTE_RATE

    def test_result_is_frame_aligned(self) -> None:
        for seconds in (0.1, 0.33333, 1.23456, 7.77):
            assert seconds_to_bytes(seconds, 176400, 4) % 4 == 0

    def test_zero_frame_size_falls_back_to_bytes(self) -> None:
        assert seconds_to_bytes(0.5, 1001, 0) == 500


class TestPlanTrim:
    """Tests for the trim arithmetic."""

    def test_three_second_window(self) -> None:
        header: WaveHeader = make_header()
        plan: TrimPlan = plan_trim(header, HEADER_SIZE, 2.0, 5.0)
        assert plan.copy_size == 3 * BYTE_RATE
        assert plan.header.data_size == 3 * BYTE_RATE
        assert plan.copy_start == HEADER_SIZE + 2 * BYTE_RATE
        # Size field drops by exactly the removed bytes
        assert header.file_size - plan.header.file_size == plan.bytes_cut
        assert plan.bytes_cut == header.data_size - 3 * BYTE_RATE

    def test_full_window_is_noop(self) -> None:
        header: WaveHeader = make_header()
        plan: TrimPlan = plan_trim(header, HEADER_SIZE, 0.0, header.duration)
        assert plan.copy_size == header.data_size
        assert plan.bytes_cut == 0
        assert plan.header.file_size == header.file_size

    def test_end_beyond_duration(self) -> None:
        with pytest.raises(TrimRangeError, match="beyond source duration"):
            plan_trim(make_header(), HEADER_SIZE, 1.0, 10.5)

    def test_start_at_end_leaves_nothing(self) -> None:
        with pytest.raises(TrimRangeError, match="Nothing left"):
            plan_trim(make_header(), HEADER_SIZE, 5.0, 5.0)

    def test_inverted_window(self) -> None:
        with pytest.raises(TrimRangeError, match="Nothing left"):
            plan_trim(make_header(), HEADER_SIZE, 6.0, 4.0)

    def test_negative_start(self) -> None:
        with pytest.raises(TrimRangeError, match="before the beginning"):
            plan_trim(make_header(), HEADER_SIZE, -0.5, 4.0)

    def test_extra_chunks_not_counted_in_output_size(self) -> None:
        header: WaveHeader = make_header(duration_s=2.0)
        header = WaveHeader(**{**header.__dict__, "file_size": header.file_size + 26})
        plan: TrimPlan = plan_trim(header, HEADER_SIZE + 26, 0.5, 1.5)
        assert plan.copy_start == HEADER_SIZE + 26 + BYTE_RATE // 2
        assert plan.header.file_size == 36 + plan.copy_size

    def test_output_header_is_canonical(self) -> None:
        header: WaveHeader = make_header()
        header = WaveHeader(**{**header.__dict__, "fmt_len": 18})
        plan: TrimPlan = plan_trim(header, HEADER_SIZE + 2, 1.0, 2.0)
        assert plan.header.fmt_len == 16
        assert plan.header.data_tag == b"data"

    def test_split_halves_share_boundary(self) -> None:
        header: WaveHeader = make_header()
        whole: TrimPlan = plan_trim(header, HEADER_SIZE, 2.0, 6.0)
        first: TrimPlan = plan_trim(header, HEADER_SIZE, 2.0, 4.0)
        second: TrimPlan = plan_trim(header, HEADER_SIZE, 4.0, 6.0)
        assert first.copy_start + first.copy_size == second.copy_start
        assert first.copy_size + second.copy_size == whole.copy_size

    def test_split_boundary_with_odd_frame_count(self) -> None:
        header: WaveHeader = make_header()
        header = WaveHeader(**{**header.__dict__, "data_size": 44101 * 2})
        start, end = 0.0, 3 / SAMPLE_RATE
        mid: float = start + (end - start) / 2
        whole: TrimPlan = plan_trim(header, HEADER_SIZE, start, end)
        first: TrimPlan = plan_trim(header, HEADER_SIZE, start, mid)
        second: TrimPlan = plan_trim(header, HEADER_SIZE, mid, end)
        assert first.copy_start + first.copy_size == second.copy_start
        assert first.copy_size + second.copy_size == whole.copy_size

    def test_split_boundaries_across_many_windows(self) -> None:
        header: WaveHeader = make_header()
        header = WaveHeader(**{**header.__dict__, "data_size": 44101 * 2})
        for start, end in ((0.1, 0.7), (0.25, 0.2500567), (0.0, 0.99), (0.333, 0.6667)):
            mid: float = start + (end - start) / 2
            whole: TrimPlan = plan_trim(header, HEADER_SIZE, start, end)
            first: TrimPlan = plan_trim(header, HEADER_SIZE, start, mid)
            second: TrimPlan = plan_trim(header, HEADER_SIZE, mid, end)
            assert first.copy_start + first.copy_size == second.copy_start
            assert first.copy_size + second.copy_size == whole.copy_size

    def test_trailing_chunk_not_counted_in_output_size(self) -> None:
        header: WaveHeader = make_header()
        # A 100-byte id3 chunk after the data
        header = WaveHeader(**{**header.__dict__, "file_size": header.file_size + 100})
        plan: TrimPlan = plan_trim(header, HEADER_SIZE, 1.0, 2.0)
        assert plan.header.file_size == 36 + plan.copy_size
