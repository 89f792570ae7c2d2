import pytest

from application.dto.batch_dto import JobRecordDTO, JobResultDTO
from application.dto.config_dto import ColumnLayout
from infrastructure.jobs.csv_job_source import CsvJobSource
from infrastructure.jobs.job_store import JobStore
from trimmer.errors import JobParseError


def write_csv(tmp_path, text: str) -> str:
    path = tmp_path / "jobs.csv"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestCsvJobSource:
    """Tests for streaming rows out of the job file."""

    def test_rows_with_line_numbers(self, tmp_path) -> None:
        path = write_csv(tmp_path, "a.wav,1,2,o.wav\nb.wav,3,4,p.wav,0.1,0.9\n")
        rows = list(CsvJobSource(path))
        assert rows == [
            (1, ["a.wav", "1", "2", "o.wav"]),
            (2, ["b.wav", "3", "4", "p.wav", "0.1", "0.9"]),
        ]

    def test_blank_lines_ignored(self, tmp_path) -> None:
        path = write_csv(tmp_path, "a.wav,1,2,o.wav\n\n , \nb.wav,3,4,p.wav\n")
        assert [line for line, _ in CsvJobSource(path)] == [1, 4]

    def test_malformed_row_does_not_stop_ingestion(self, tmp_path) -> None:
        path = write_csv(tmp_path, 'a.wav,1,2,o.wav\nb.wav,"3"x,4,p.wav\nc.wav,5,6,q.wav\n')
        source = CsvJobSource(path)
        rows = list(source)
        assert [row[0] for _, row in rows] == ["a.wav", "c.wav"]
        assert source.malformed == 1

    def test_undecodable_row_does_not_stop_ingestion(self, tmp_path) -> None:
        path = tmp_path / "jobs.csv"
        path.write_bytes(b"a.wav,1,2,o1.wav\n\xff\xfe.wav,1,2,bad.wav\na.wav,2,3,o2.wav\n")
        source = CsvJobSource(str(path))
        rows = list(source)
        assert rows == [
            (1, ["a.wav", "1", "2", "o1.wav"]),
            (3, ["a.wav", "2", "3", "o2.wav"]),
        ]
        assert source.malformed == 1

    def test_custom_delimiter(self, tmp_path) -> None:
        path = write_csv(tmp_path, "a.wav;1;2;o.wav\n")
        assert list(CsvJobSource(path, delimiter=";")) == [(1, ["a.wav", "1", "2", "o.wav"])]

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError, match="Job file not found"):
            CsvJobSource(str(tmp_path / "nope.csv"))

    def test_directory_is_rejected(self, tmp_path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            CsvJobSource(str(tmp_path))


class TestJobRecord:
    """Tests for mapping a raw row onto a JobRecordDTO."""

    def test_required_fields_only(self) -> None:
        record = JobRecordDTO.from_row(["a.wav", "1.5", "2.5", "o.wav"], ColumnLayout())
        assert record.start_sec == 1.5
        assert record.end_sec == 2.5
        assert record.diff_error is None
        assert record.ratio_error is None

    def test_optional_fields(self) -> None:
        record = JobRecordDTO.from_row(
            ["a.wav", "1", "2", "o.wav", "0.25", "0.9"], ColumnLayout()
        )
        assert record.diff_error == 0.25
        assert record.ratio_error == pytest.approx(0.1)

    def test_blank_optional_field_is_absent(self) -> None:
        record = JobRecordDTO.from_row(["a.wav", "1", "2", "o.wav", "", "1.2"], ColumnLayout())
        assert record.diff_error is None
        assert record.ratio_error == pytest.approx(0.2)

    def test_empty_file_name(self) -> None:
        with pytest.raises(JobParseError, match="empty"):
            JobRecordDTO.from_row(["", "1", "2", "o.wav"], ColumnLayout())

    def test_malformed_end(self) -> None:
        with pytest.raises(JobParseError, match="end"):
            JobRecordDTO.from_row(["a.wav", "1", "x", "o.wav"], ColumnLayout())

    def test_non_finite_time(self) -> None:
        with pytest.raises(JobParseError, match="finite"):
            JobRecordDTO.from_row(["a.wav", "nan", "2", "o.wav"], ColumnLayout())


class TestJobStore:
    """Tests for the per-batch state store."""

    def test_lifecycle_and_summary(self) -> None:
        store = JobStore()
        for line in (1, 2, 3, 4):
            store.add(line)
        store.set_state(1, "validating")
        assert store.get(1).status == "validating"

        store.finish(JobResultDTO(line_no=2, status="skipped"))
        store.finish(JobResultDTO(line_no=1, status="done", deleted=True))
        store.finish(JobResultDTO(line_no=3, status="failed", error="x"))
        assert store.finish(JobResultDTO(line_no=4, status="invalid")) == 4

        batch = store.summary()
        assert (batch.total, batch.done, batch.skipped, batch.failed, batch.invalid) == (4, 1, 1, 1, 1)
        assert batch.deleted == 1
        assert [r.line_no for r in batch.results] == [1, 2, 3, 4]

    def test_rejects_unknown_states(self) -> None:
        store = JobStore()
        store.add(1)
        with pytest.raises(ValueError):
            store.set_state(1, "done")
        with pytest.raises(ValueError):
            store.finish(JobResultDTO(line_no=1, status="cutting"))
