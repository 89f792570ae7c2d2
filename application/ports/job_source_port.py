# application/ports/job_source_port.py
# Port interface for the producer of raw job rows.

from abc import ABC, abstractmethod
from typing import Iterator, List, Tuple


class IJobSource(ABC):
    """Ordered stream of (line_no, row) tuples; exhaustion means end of input."""

    @abstractmethod
    def __iter__(self) -> Iterator[Tuple[int, List[str]]]:
        ...
