# infrastructure/jobs/csv_job_source.py
# Implementation of IJobSource reading rows from a delimited text file.

import csv
import logging
from typing import BinaryIO, Iterator, List, Tuple

from application.ports.job_source_port import IJobSource
from trimmer.utils import validate_job_file

logger = logging.getLogger("wav_trimmer.jobs")


class CsvJobSource(IJobSource):
    """
    Stream job rows from a CSV file.

    A line that does not decode, or a row the csv module cannot parse, is
    logged, counted in ``malformed`` and skipped; only the real end of the
    file ends ingestion. Blank lines are ignored.
    """

    def __init__(self, path: str, delimiter: str = ",", encoding: str = "utf-8") -> None:
        validate_job_file(path)
        self.path = path
        self.delimiter = delimiter
        self.encoding = encoding
        self.malformed: int = 0
        self._line_no: int = 0

    def _decoded_lines(self, f: BinaryIO) -> Iterator[str]:
        # Decoded line by line so one bad byte costs one row, not the file
        for raw in f:
            self._line_no += 1
            try:
                yield raw.decode(self.encoding)
            except UnicodeDecodeError as e:
                self.malformed += 1
                logger.warning(
                    "%s:%d: undecodable row skipped: %s", self.path, self._line_no, e
                )

    def __iter__(self) -> Iterator[Tuple[int, List[str]]]:
        self._line_no = 0
        with open(self.path, "rb") as f:
            reader = csv.reader(
                self._decoded_lines(f), delimiter=self.delimiter, strict=True
            )
            while True:
                try:
                    row: List[str] = next(reader)
                except StopIteration:
                    return
                except csv.Error as e:
                    self.malformed += 1
                    logger.warning(
                        "%s:%d: malformed row skipped: %s", self.path, self._line_no, e
                    )
                    continue
                if not row or not any(cell.strip() for cell in row):
                    continue
                yield self._line_no, row
