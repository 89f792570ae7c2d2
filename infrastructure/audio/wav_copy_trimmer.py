# infrastructure/audio/wav_copy_trimmer.py
# Implementation of IAudioTrimmer by raw PCM byte copy.

import logging

from application.dto.batch_dto import CutResultDTO, TrimRequestDTO
from application.ports.audio_trimmer_port import IAudioTrimmer
from trimmer.core import ScratchBuffer, cut_wav
from trimmer.errors import TrimError
from trimmer.wav_header import DEFAULT_SCAN_LIMIT

logger = logging.getLogger("wav_trimmer.cut")


class WavCopyTrimmer(IAudioTrimmer):
    """Trim WAVE files by copying the byte range; one instance per worker."""

    def __init__(
        self,
        max_output_bytes: int,
        scan_limit: int = DEFAULT_SCAN_LIMIT,
    ) -> None:
        self.max_output_bytes = max_output_bytes
        self.scan_limit = scan_limit
        self.scratch = ScratchBuffer(max_output_bytes)

    def cut(self, request: TrimRequestDTO) -> CutResultDTO:
        try:
            return cut_wav(
                request,
                self.scratch,
                max_output_bytes=self.max_output_bytes,
                scan_limit=self.scan_limit,
            )
        except (TrimError, OSError) as e:
            logger.debug("cut %s failed: %s", request.dest_path, e)
            return CutResultDTO(request=request, error=str(e))
