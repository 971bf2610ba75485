"""SECAM composite encoder: RGB image -> 1D composite signal."""

import numpy as np

from .config import SECAM, check_standard
from .constants import CHROMA_AMPLITUDE, ENCODE_GAMMA
from .imaging import as_rgb, resize_rows
from .modulation import modulate
from .timing import signal_length, scanline_timing, scanline_states


def rgb_to_ydbdr(rgb, config=SECAM):
    """Convert uint8 RGB (... x 3) to gamma-corrected Y, Db, Dr (float64)."""
    linear = (rgb.astype(np.float64) / 255.0) ** ENCODE_GAMMA
    return linear @ config.rgb_to_ydbdr.T


def encode_frame(image, config=SECAM):
    """Encode a still image to one frame of composite SECAM signal.

    The image is resampled to ``config.total_scanlines`` rows; each row
    becomes one scanline of ``image`` width active samples padded by
    zero-valued porches. Even lines carry Db, odd lines Dr, as continuous
    phase FM of the line's own subcarrier.

    Args:
        image: H x W x 3 RGB or H x W x 4 RGBA uint8 array.
        config: Format configuration.

    Returns:
        1D float64 composite signal of ``signal_length(W, config)`` samples.
    """
    check_standard(config)
    rgb = as_rgb(image)
    width = rgb.shape[1]
    lines = config.total_scanlines

    length = signal_length(width, config)
    frame = resize_rows(rgb, lines)
    timing = scanline_timing(length, lines, config.line_ratio, width)

    states = scanline_states(lines, config.interlaced)
    rows = np.array([s.row for s in states])
    channels = np.array([s.channel for s in states])

    ydbdr = rgb_to_ydbdr(frame[rows], config)  # (lines, width, 3)
    chroma = np.where(channels[:, None] == 0, ydbdr[:, :, 1], ydbdr[:, :, 2])

    subcarriers = config.chroma_channels
    carrier = np.array([subcarriers[ch].rest_frequency for ch in channels])
    deviation = np.array([subcarriers[ch].deviation for ch in channels])

    active = modulate(ydbdr[:, :, 0], chroma, carrier, deviation,
                      config.active_time / width, CHROMA_AMPLITUDE)

    # Porches stay at zero; sync is not modeled.
    signal = np.zeros(length, dtype=np.float64)
    indices = timing.active_starts[:, None] + np.arange(width)
    signal[indices] = active
    return signal
