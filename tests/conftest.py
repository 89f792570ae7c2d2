import os
import struct

import numpy as np
import pytest

SAMPLE_RATE: int = 44100
BYTE_RATE: int = SAMPLE_RATE * 2  # 16-bit mono


def make_mono_wav(path: str, duration: float = 10.0, sr: int = SAMPLE_RATE) -> np.ndarray:
    """Write a canonical 44-byte-header 16-bit mono PCM sine; returns the samples."""
    num_frames: int = int(round(sr * duration))
    t: np.ndarray = np.arange(num_frames, dtype=np.float64) / sr
    samples: np.ndarray = (np.sin(2 * np.pi * 440 * t) * 12000).astype("<i2")
    data: bytes = samples.tobytes()
    header: bytes = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF", 36 + len(data), b"WAVE", b"fmt ", 16, 1, 1,
        sr, sr * 2, 2, 16, b"data", len(data),
    )
    with open(path, "wb") as f:
        f.write(header)
        f.write(data)
    return samples


def insert_list_chunk(path: str, payload: bytes = b"INFOISFT\x06\x00\x00\x00lavf\x00\x00") -> int:
    """
    Rewrite a canonical WAV so a LIST chunk sits between fmt and data.

    Returns the number of bytes inserted.
    """
    with open(path, "rb") as f:
        raw: bytes = f.read()
    data_pos: int = raw.index(b"data")
    chunk: bytes = b"LIST" + struct.pack("<I", len(payload)) + payload
    new_raw: bytes = raw[:data_pos] + chunk + raw[data_pos:]
    riff_size: int = struct.unpack_from("<I", new_raw, 4)[0] + len(chunk)
    new_raw = new_raw[:4] + struct.pack("<I", riff_size) + new_raw[8:]
    with open(path, "wb") as f:
        f.write(new_raw)
    return len(chunk)


def read_data(path: str) -> bytes:
    """Return the raw bytes after the 44-byte canonical header."""
    with open(path, "rb") as f:
        f.seek(44)
        return f.read()


@pytest.fixture
def wav_10s(tmp_path) -> str:
    """10-second, 16-bit mono, 44100 Hz PCM fixture."""
    path: str = os.path.join(str(tmp_path), "src.wav")
    make_mono_wav(path)
    return path


@pytest.fixture
def wav_with_list(tmp_path) -> str:
    """2-second fixture with a LIST chunk before the data chunk."""
    path: str = os.path.join(str(tmp_path), "list.wav")
    make_mono_wav(path, duration=2.0)
    insert_list_chunk(path)
    return path
