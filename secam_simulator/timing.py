"""Scanline geometry shared by the encoder and decoder.

Everything here is a pure function of the signal geometry. The encoder and
decoder each recompute the same tables from (signal length, scanline count,
line ratio, active width) rather than passing state between calls.
"""

from collections import namedtuple

import numpy as np


ScanlineTiming = namedtuple('ScanlineTiming', ['boundaries', 'active_starts'])

ScanlineState = namedtuple('ScanlineState', ['index', 'polarity', 'channel', 'row'])


def signal_length(width, config):
    """Number of samples in one encoded frame for an image ``width`` pixels wide."""
    return int(width * config.total_scanlines * config.line_ratio)


def active_width_for(length, config):
    """Recover the active width that produced a signal of ``length`` samples."""
    return int(round(length / (config.total_scanlines * config.line_ratio)))


def porch_fraction(line_ratio):
    """Leading porch as a fraction of the active width."""
    return (line_ratio - 1.0) / 2.0


def scanline_timing(length, scanlines, line_ratio, active_width=None):
    """Partition a signal of ``length`` samples into ``scanlines`` lines.

    Args:
        length: Total signal length in samples.
        scanlines: Number of scanlines in the frame.
        line_ratio: Scanline duration divided by active duration.
        active_width: Active samples per line. Derived from the geometry
            when omitted.

    Returns:
        ScanlineTiming with ``boundaries`` (scanlines + 1 entries, first 0,
        last ``length``) and ``active_starts`` (absolute sample index where
        each line's active window begins).
    """
    if length <= 0:
        raise ValueError(f"Signal length must be positive, got {length}")
    if scanlines <= 0:
        raise ValueError(f"Scanline count must be positive, got {scanlines}")
    if active_width is None:
        active_width = length / (scanlines * line_ratio)

    lines = np.arange(scanlines + 1, dtype=np.int64)
    boundaries = (lines * length) // scanlines

    porch = porch_fraction(line_ratio) * active_width
    line_starts = lines[:-1].astype(np.float64) * length / scanlines
    active_starts = (line_starts + porch).astype(np.int64)
    return ScanlineTiming(boundaries, active_starts)


def scanline_state(index, scanlines, interlaced):
    """Field and chroma state for logical scanline ``index``.

    The first ceil(scanlines / 2) lines form the top field on even rows, the
    rest form the bottom field on odd rows. Chroma alternates every line,
    starting with channel 0 (Db).
    """
    first_field = (scanlines + 1) // 2
    polarity = 1 if index >= first_field else 0
    if interlaced:
        row = 2 * (index - polarity * first_field) + polarity
    else:
        row = index
    return ScanlineState(index, polarity, index % 2, row)


def scanline_states(scanlines, interlaced):
    """List of ScanlineState for every logical scanline in a frame."""
    return [scanline_state(i, scanlines, interlaced) for i in range(scanlines)]
