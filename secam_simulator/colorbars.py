"""EBU color bar test pattern generator."""

import numpy as np


# 100/0/100/0 bars, left to right
EBU_BARS = np.array([
    [255, 255, 255],   # White
    [255, 255,   0],   # Yellow
    [  0, 255, 255],   # Cyan
    [  0, 255,   0],   # Green
    [255,   0, 255],   # Magenta
    [255,   0,   0],   # Red
    [  0,   0, 255],   # Blue
    [  0,   0,   0],   # Black
], dtype=np.uint8)


def generate_colorbars(width=720, height=576):
    """Generate a full-height EBU color bar test pattern.

    Args:
        width: Output image width.
        height: Output image height.

    Returns:
        RGB frame as numpy array (height x width x 3, uint8).
    """
    if width < len(EBU_BARS) or height < 1:
        raise ValueError(f"Color bars need at least {len(EBU_BARS)}x1 pixels, got {width}x{height}")

    frame = np.zeros((height, width, 3), dtype=np.uint8)
    bar_width = width // len(EBU_BARS)
    last = len(EBU_BARS) - 1

    for i, color in enumerate(EBU_BARS):
        x_start = i * bar_width
        x_end = (i + 1) * bar_width if i < last else width
        frame[:, x_start:x_end] = color

    return frame
