# infrastructure/jobs/job_store.py
# In-memory job store for one batch run, the single source of truth for job state.
# Thread-safe: all mutations are guarded by a Lock.

from threading import Lock
from typing import Dict, List, Optional

from application.dto.batch_dto import BatchResultDTO, JobResultDTO

# Lifecycle states a job passes through; the last four are terminal
JOB_STATES: tuple = (
    "queued",
    "validating",
    "cutting",
    "deleting",
    "skipped",
    "invalid",
    "failed",
    "done",
)
TERMINAL_STATES: frozenset = frozenset({"skipped", "invalid", "failed", "done"})


class JobStore:
    """Per-batch record of every job's current state and final result."""

    def __init__(self) -> None:
        self._jobs: Dict[int, JobResultDTO] = {}
        self._lock: Lock = Lock()
        self._finished: int = 0

    def add(self, line_no: int) -> None:
        """Register a queued job."""
        with self._lock:
            self._jobs[line_no] = JobResultDTO(line_no=line_no)

    def get(self, line_no: int) -> Optional[JobResultDTO]:
        with self._lock:
            return self._jobs.get(line_no)

    def set_state(self, line_no: int, state: str) -> None:
        """Move a job to a non-terminal state."""
        if state not in JOB_STATES or state in TERMINAL_STATES:
            raise ValueError(f"Not an intermediate job state: {state!r}")
        with self._lock:
            self._jobs[line_no].status = state

    def finish(self, result: JobResultDTO) -> int:
        """Store a terminal result; returns how many jobs have finished."""
        if result.status not in TERMINAL_STATES:
            raise ValueError(f"Not a terminal job state: {result.status!r}")
        with self._lock:
            self._jobs[result.line_no] = result
            self._finished += 1
            return self._finished

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def summary(self) -> BatchResultDTO:
        """Aggregate every job into a BatchResultDTO, ordered by line number."""
        with self._lock:
            results: List[JobResultDTO] = [
                self._jobs[k] for k in sorted(self._jobs)
            ]
        batch = BatchResultDTO(results=results, total=len(results))
        for r in results:
            if r.status == "done":
                batch.done += 1
            elif r.status == "skipped":
                batch.skipped += 1
            elif r.status == "invalid":
                batch.invalid += 1
            elif r.status == "failed":
                batch.failed += 1
            if r.deleted:
                batch.deleted += 1
        return batch
