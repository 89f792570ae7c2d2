# trimmer/errors.py
# Error taxonomy for the trim pipeline.
# Every error here is caught at the job boundary and never stops a worker.


class TrimError(Exception):
    """Base class for every per-job failure raised by the trimmer."""


class WavFormatError(TrimError, ValueError):
    """Not a RIFF/WAVE container, or no data chunk within the scan bound."""


class TrimRangeError(TrimError, ValueError):
    """Requested window is empty, inverted, or beyond the source duration."""


class ResourceLimitError(TrimError):
    """Trimmed output is larger than the configured output cap."""


class JobParseError(TrimError, ValueError):
    """A job record has a missing or malformed field."""
