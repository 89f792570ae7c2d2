# trimmer/wav_header.py
# RIFF/WAVE header model and tolerant data-chunk locator.

"""
Canonical 44-byte PCM WAVE layout (all integers little-endian):

    0   "RIFF"
    4   file size - 8
    8   "WAVE"
    12  "fmt "
    16  fmt chunk length (16 for PCM)
    20  format code (1 = PCM)
    22  channels
    24  sample rate
    28  byte rate     (sample_rate * channels * bits_per_sample / 8)
    32  frame size    (channels * bits_per_sample / 8)
    34  bits per sample
    36  "data"
    40  data size

Files written by editors often carry extra chunks (LIST, fact, an extended
fmt block) between the format fields and "data"; read_wave_header() scans
past them.
"""

import struct
from dataclasses import dataclass, replace
from typing import BinaryIO, Tuple

from trimmer.errors import WavFormatError

HEADER_STRUCT: struct.Struct = struct.Struct("<4sI4s4sIHHIIHH4sI")
HEADER_SIZE: int = HEADER_STRUCT.size  # 44
DATA_TAG_OFFSET: int = 36
DATA_TAG: bytes = b"data"
PCM_FORMATS: tuple = (1,)

# How far past the canonical data tag position we look for "data"
DEFAULT_SCAN_LIMIT: int = 1024 * 1024


@dataclass(frozen=True)
class WaveHeader:
    riff            : bytes
    file_size       : int
    wave            : bytes
    fmt             : bytes
    fmt_len         : int
    audio_format    : int
    channels        : int
    sample_rate     : int
    byte_rate       : int
    frame_size      : int
    bits_per_sample : int
    data_tag        : bytes
    data_size       : int

    @classmethod
    def unpack(cls, raw: bytes) -> "WaveHeader":
        return cls(*HEADER_STRUCT.unpack(raw))

    def pack(self) -> bytes:
        """Serialise in the canonical 44-byte layout."""
        return HEADER_STRUCT.pack(
            self.riff,
            self.file_size,
            self.wave,
            self.fmt,
            self.fmt_len,
            self.audio_format,
            self.channels,
            self.sample_rate,
            self.byte_rate,
            self.frame_size,
            self.bits_per_sample,
            self.data_tag,
            self.data_size,
        )

    @property
    def duration(self) -> float:
        """Length of the data chunk in seconds."""
        return self.data_size / self.byte_rate

    def with_data_size(self, data_size: int, file_size: int) -> "WaveHeader":
        """Return a canonical copy describing a data chunk of *data_size* bytes."""
        return replace(
            self,
            file_size=file_size,
            fmt=b"fmt ",
            fmt_len=16,
            data_tag=DATA_TAG,
            data_size=data_size,
        )


def read_wave_header(
    fp: BinaryIO, scan_limit: int = DEFAULT_SCAN_LIMIT
) -> Tuple[WaveHeader, int]:
    """
    Parse the header of an open WAVE file and locate its PCM data.

    Args:
        fp:         Binary file object positioned at the start of the file.
        scan_limit: Maximum number of bytes searched for the "data" tag
                    when it is not at the canonical offset.

    Returns:
        (header, data_offset) where data_offset is the absolute position of
        the first PCM byte, i.e. right after the data size field.

    Raises:
        WavFormatError: Not a RIFF/WAVE file, not PCM, or no "data" chunk found.
        OSError:        The underlying read failed.
    """
    raw: bytes = fp.read(HEADER_SIZE)
    if len(raw) < HEADER_SIZE:
        raise WavFormatError(
            f"File is too short to be a WAVE file ({len(raw)} bytes).\n"
            f"    → Check that the source is a complete PCM WAV file."
        )

    header: WaveHeader = WaveHeader.unpack(raw)
    if header.riff != b"RIFF" or header.wave != b"WAVE":
        raise WavFormatError(
            f"Not a RIFF/WAVE container (tags {header.riff!r}/{header.wave!r}).\n"
            f"    → Only PCM WAV sources are supported."
        )
    if header.audio_format not in PCM_FORMATS:
        raise WavFormatError(
            f"Unsupported WAVE format code 0x{header.audio_format:04x}.\n"
            f"    → Only uncompressed PCM (format 1) sources can be cut."
        )
    if header.byte_rate <= 0:
        raise WavFormatError("WAVE header declares a byte rate of 0.")

    data_offset: int = HEADER_SIZE
    if header.data_tag != DATA_TAG:
        tag_pos: int = _scan_for_data_tag(fp, scan_limit)
        fp.seek(tag_pos + len(DATA_TAG))
        size_raw: bytes = fp.read(4)
        if len(size_raw) < 4:
            raise WavFormatError("WAVE data chunk is missing its size field.")
        (data_size,) = struct.unpack("<I", size_raw)
        header = replace(header, data_tag=DATA_TAG, data_size=data_size)
        data_offset = tag_pos + 8

    fp.seek(data_offset)
    return header, data_offset


def _scan_for_data_tag(fp: BinaryIO, scan_limit: int) -> int:
    """Forward scan from the canonical tag position; returns the tag's offset."""
    fp.seek(DATA_TAG_OFFSET)
    # +3 so a tag starting on the last scanned byte is still whole
    window: bytes = fp.read(scan_limit + len(DATA_TAG) - 1)
    pos: int = window.find(DATA_TAG)
    if pos < 0:
        raise WavFormatError(
            f"No 'data' chunk within {scan_limit} bytes of the header.\n"
            f"    → The file may be truncated or not contain PCM audio."
        )
    return DATA_TAG_OFFSET + pos
