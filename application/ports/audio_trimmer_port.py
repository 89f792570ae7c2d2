# application/ports/audio_trimmer_port.py
# Port interface for cutting one WAVE file.

from abc import ABC, abstractmethod

from application.dto.batch_dto import CutResultDTO, TrimRequestDTO


class IAudioTrimmer(ABC):
    """Abstract base class for audio trimming."""

    @abstractmethod
    def cut(self, request: TrimRequestDTO) -> CutResultDTO:
        """
        Cut the source to the requested window and write the destination.

        Args:
            request: Source/destination paths and the window in seconds.

        Returns:
            CutResultDTO; ``error`` is set instead of raising when the cut
            fails for a per-job reason.
        """
        ...
