"""
Bounded-concurrency batch executor.

Producer/worker protocol:

    1. run() starts ``config.workers`` threads, each owning its own
       IAudioTrimmer (and therefore its own scratch buffer).
    2. The producer puts (line_no, row) items on a bounded FIFO queue;
       put() blocks while the queue is full.
    3. When the job source is exhausted the producer closes the queue by
       putting one _CLOSE sentinel per worker.
    4. Each worker drains items in FIFO order until it takes a sentinel,
       then exits. run() joins every worker before returning.

A job's failure is recorded on its result and never escapes the worker.
Two jobs that name the same source file can race between one worker's copy
and another's delete; job files are expected not to do that.
"""

import logging
import os
import queue
import threading
from typing import Callable, Iterable, List, Optional, Tuple

from application.dto.batch_dto import (
    BatchResultDTO,
    CutResultDTO,
    JobRecordDTO,
    JobResultDTO,
    TrimRequestDTO,
)
from application.dto.config_dto import TrimConfig
from application.ports.audio_trimmer_port import IAudioTrimmer
from infrastructure.audio.wav_copy_trimmer import WavCopyTrimmer
from infrastructure.jobs.job_store import JobStore
from trimmer.errors import JobParseError
from trimmer.utils import SPLIT_PREFIXES, get_output_path, get_source_path

logger = logging.getLogger("wav_trimmer.batch")

_CLOSE = object()

StateCallback = Callable[[str], None]


def _gate_threshold(value: Optional[float]) -> Optional[float]:
    """A quality gate is active only for a configured, positive threshold."""
    if value is None or value <= 0:
        return None
    return value


def failed_quality_gate(record: JobRecordDTO, config: TrimConfig) -> Optional[str]:
    """Return the reason the record is filtered out, or None if it passes."""
    max_diff = _gate_threshold(config.max_diff_error)
    if record.diff_error is not None and max_diff is not None:
        if record.diff_error > max_diff:
            return f"diff error {record.diff_error} > {max_diff}"

    max_ratio = _gate_threshold(config.max_ratio_error)
    ratio_error = record.ratio_error
    if ratio_error is not None and max_ratio is not None:
        if ratio_error > max_ratio:
            return f"ratio error {ratio_error:.6f} > {max_ratio}"
    return None


def build_requests(record: JobRecordDTO, config: TrimConfig) -> List[TrimRequestDTO]:
    """Turn a record into one request, or two in split mode."""
    source_path: str = get_source_path(config.source_dir, record.source_file)
    start: float = record.start_sec + config.offset_start
    end: float = record.end_sec + config.offset_end

    if not config.split_in_half:
        return [
            TrimRequestDTO(
                source_path=source_path,
                dest_path=get_output_path(config.dest_dir, record.out_file),
                start_sec=start,
                end_sec=end,
            )
        ]

    # Both halves share this exact value, so their byte boundaries coincide
    mid: float = start + (end - start) / 2
    first, second = SPLIT_PREFIXES
    return [
        TrimRequestDTO(
            source_path=source_path,
            dest_path=get_output_path(config.dest_dir, record.out_file, first),
            start_sec=start,
            end_sec=mid,
        ),
        TrimRequestDTO(
            source_path=source_path,
            dest_path=get_output_path(config.dest_dir, record.out_file, second),
            start_sec=mid,
            end_sec=end,
        ),
    ]


def should_delete_source(record: JobRecordDTO, config: TrimConfig) -> bool:
    """
    Deletion needs both quality fields on the record and both deletion
    thresholds configured; a partial configuration never deletes.
    """
    if not config.deletion_enabled:
        return False
    ratio_error = record.ratio_error
    if record.diff_error is None or ratio_error is None:
        return False
    return (
        record.diff_error <= config.delete_diff_error
        and ratio_error <= config.delete_ratio_error
    )


def process_job(
    line_no  : int,
    row      : List[str],
    config   : TrimConfig,
    trimmer  : IAudioTrimmer,
    on_state : Optional[StateCallback] = None,
) -> JobResultDTO:
    """Run one job record through validate → gate → cut → delete."""

    def _state(name: str) -> None:
        if on_state:
            on_state(name)

    result = JobResultDTO(line_no=line_no)

    _state("validating")
    try:
        record: JobRecordDTO = JobRecordDTO.from_row(row, config.columns)
    except JobParseError as e:
        result.status = "invalid"
        result.error = str(e)
        if row and len(row) > config.columns.source_file:
            result.source_file = row[config.columns.source_file]
        logger.warning("line %d: %s", line_no, e)
        return result
    result.source_file = record.source_file

    reason: Optional[str] = failed_quality_gate(record, config)
    if reason is not None:
        result.status = "skipped"
        result.error = reason
        logger.debug("line %d: skipped %s (%s)", line_no, record.source_file, reason)
        return result

    _state("cutting")
    for request in build_requests(record, config):
        cut: CutResultDTO = trimmer.cut(request)
        result.cuts.append(cut)
        if not cut.ok:
            log = logger.warning if config.verbose else logger.debug
            log("line %d: %s → %s failed: %s",
                line_no, request.source_path, request.dest_path, cut.error)

    failed_cuts: List[CutResultDTO] = [c for c in result.cuts if not c.ok]
    if failed_cuts:
        result.status = "failed"
        result.error = failed_cuts[0].error
        return result

    if should_delete_source(record, config):
        _state("deleting")
        source_path: str = result.cuts[0].request.source_path
        try:
            os.remove(source_path)
            result.deleted = True
        except OSError as e:
            log = logger.warning if config.verbose else logger.debug
            log("line %d: could not delete %s: %s", line_no, source_path, e)

    result.status = "done"
    return result


class BatchScheduler:
    """Fixed-size worker pool that applies trim jobs from a job source."""

    def __init__(
        self,
        config: TrimConfig,
        trimmer_factory: Optional[Callable[[], IAudioTrimmer]] = None,
    ) -> None:
        if config.workers < 1:
            raise ValueError(f"workers must be at least 1. Got: {config.workers}.")
        self.config = config
        self.trimmer_factory = trimmer_factory or (
            lambda: WavCopyTrimmer(config.max_output_bytes, config.scan_limit)
        )
        self.store = JobStore()

    def run(
        self,
        jobs: Iterable[Tuple[int, List[str]]],
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> BatchResultDTO:
        """
        Feed every job to the pool and block until all of them finished.

        Args:
            jobs:              (line_no, row) tuples, e.g. a CsvJobSource.
            progress_callback: Optional callback (finished, queued_so_far).
        """
        work: "queue.Queue" = queue.Queue(maxsize=max(1, self.config.queue_size))
        workers: List[threading.Thread] = [
            threading.Thread(
                target=self._worker,
                args=(work, progress_callback),
                name=f"trim-worker-{i}",
                daemon=True,
            )
            for i in range(self.config.workers)
        ]
        for t in workers:
            t.start()

        try:
            for line_no, row in jobs:
                self.store.add(line_no)
                work.put((line_no, row))
        finally:
            # Close the queue: one sentinel per worker, after every real item
            for _ in workers:
                work.put(_CLOSE)
            for t in workers:
                t.join()

        return self.store.summary()

    def _worker(
        self,
        work: "queue.Queue",
        progress_callback: Optional[Callable[[int, int], None]],
    ) -> None:
        trimmer: IAudioTrimmer = self.trimmer_factory()
        while True:
            item = work.get()
            if item is _CLOSE:
                logger.debug("%s exiting", threading.current_thread().name)
                return
            line_no, row = item
            try:
                result = process_job(
                    line_no,
                    row,
                    self.config,
                    trimmer,
                    on_state=lambda s, n=line_no: self.store.set_state(n, s),
                )
            except Exception as e:
                logger.error("line %d: unexpected error: %s", line_no, e, exc_info=True)
                result = JobResultDTO(line_no=line_no, status="failed", error=str(e))
            finished: int = self.store.finish(result)
            if progress_callback:
                progress_callback(finished, len(self.store))
