"""NumPy and WAV file export/import for composite SECAM signals."""

import struct

import numpy as np

from .config import SECAM


# Composite levels run from -A to 1 + A (A = chroma amplitude, 0.115). Centring
# on mid-gray and scaling by WAV_GAIN keeps that span inside the [-1, 1]
# audio range; import_wav applies the inverse.
WAV_CENTER = 0.5
WAV_GAIN = 1.6


def sample_rate_for(signal, config=SECAM):
    """Sample rate implied by one frame of ``signal`` under ``config``."""
    return len(signal) / config.frame_time


def export_signal(signal, filepath):
    """Export a composite signal as a NumPy .npy file.

    Saves the raw float64 signal array directly.

    Args:
        signal: 1D numpy array of composite signal.
        filepath: Output .npy file path.
    """
    np.save(filepath, np.asarray(signal, dtype=np.float64))


def import_signal(filepath, config=SECAM):
    """Import a composite signal from a NumPy .npy file.

    Args:
        filepath: Input .npy file path.
        config: Format the signal was encoded with.

    Returns:
        Tuple of (signal, sample_rate) where signal is a 1D float64 array
        holding one frame.
    """
    signal = np.load(filepath).astype(np.float64)
    if signal.ndim != 1 or signal.size == 0:
        raise ValueError(f"Expected a non-empty 1D signal in {filepath}, got shape {signal.shape}")
    return signal, sample_rate_for(signal, config)


def export_wav(signal, filepath, sample_rate=48000):
    """Export the composite signal as a WAV file for viewing in audio editors.

    Every sample is preserved; the header simply declares a standard audio
    sample rate so programs like Audacity can open it. Levels are mapped
    with (signal - WAV_CENTER) * WAV_GAIN, which puts a full composite
    frame inside [-1, 1]. Nothing is clipped; impairments that overshoot
    are stored as-is in the float samples.

    Args:
        signal: 1D numpy array of composite signal.
        filepath: Output WAV file path.
        sample_rate: Declared sample rate in the WAV header (default 48000).
    """
    audio = (np.asarray(signal, dtype=np.float64) - WAV_CENTER) * WAV_GAIN
    _write_float_wav(audio.astype(np.float32).tobytes(), int(sample_rate), filepath)


def _write_float_wav(audio_bytes, sample_rate, filepath):
    """Write raw float32 audio bytes as a WAVE_FORMAT_IEEE_FLOAT file."""
    num_channels = 1
    bits_per_sample = 32
    block_align = num_channels * (bits_per_sample // 8)
    byte_rate = sample_rate * block_align
    data_size = len(audio_bytes)

    fmt_chunk = struct.pack('<4sIHHIIHH',
        b'fmt ', 16, 3, num_channels,
        sample_rate, byte_rate, block_align, bits_per_sample,
    )
    data_chunk_header = struct.pack('<4sI', b'data', data_size)
    riff_size = 4 + len(fmt_chunk) + len(data_chunk_header) + data_size

    with open(filepath, 'wb') as f:
        f.write(struct.pack('<4sI4s', b'RIFF', riff_size, b'WAVE'))
        f.write(fmt_chunk)
        f.write(data_chunk_header)
        f.write(audio_bytes)


def import_wav(filepath):
    """Import a composite signal from a WAV file.

    Supports both IEEE float (format 3) and PCM (format 1) WAV files.
    Audio levels are mapped back through the inverse of export_wav.

    Returns:
        Tuple of (signal, declared_sample_rate). The declared rate is the
        header value, not the signal's true rate.
    """
    with open(filepath, 'rb') as f:
        riff = f.read(12)
        if len(riff) < 12 or riff[:4] != b'RIFF' or riff[8:12] != b'WAVE':
            raise ValueError("Not a valid WAV file")

        format_tag = None
        sample_rate = None
        bits_per_sample = None
        audio_data = None

        while True:
            chunk_header = f.read(8)
            if len(chunk_header) < 8:
                break
            chunk_id, chunk_size = struct.unpack('<4sI', chunk_header)

            if chunk_id == b'fmt ':
                fmt_data = f.read(chunk_size)
                format_tag = struct.unpack('<H', fmt_data[0:2])[0]
                sample_rate = struct.unpack('<I', fmt_data[4:8])[0]
                bits_per_sample = struct.unpack('<H', fmt_data[14:16])[0]
            elif chunk_id == b'data':
                audio_data = f.read(chunk_size)
            else:
                f.read(chunk_size)
                # WAV chunks are word-aligned
                if chunk_size % 2 != 0:
                    f.read(1)

        if format_tag is None or audio_data is None:
            raise ValueError("WAV file missing fmt or data chunk")

        if format_tag == 3:  # IEEE float
            if bits_per_sample == 32:
                audio = np.frombuffer(audio_data, dtype=np.float32).astype(np.float64)
            elif bits_per_sample == 64:
                audio = np.frombuffer(audio_data, dtype=np.float64)
            else:
                raise ValueError(f"Unsupported float bit depth: {bits_per_sample}")
        elif format_tag == 1:  # PCM
            if bits_per_sample == 16:
                audio = np.frombuffer(audio_data, dtype=np.int16).astype(np.float64) / 32768.0
            elif bits_per_sample == 32:
                audio = np.frombuffer(audio_data, dtype=np.int32).astype(np.float64) / 2147483648.0
            else:
                raise ValueError(f"Unsupported PCM bit depth: {bits_per_sample}")
        else:
            raise ValueError(f"Unsupported WAV format tag: {format_tag}")

    signal = audio / WAV_GAIN + WAV_CENTER
    return signal, sample_rate
