"""SECAM composite decoder: 1D composite signal -> RGBA image."""

import numpy as np

from .config import SECAM, check_standard
from .constants import (
    ALL_CHANNELS, LUMA_CHANNEL, DB_CHANNEL, DR_CHANNEL,
    CHROMA_LIMITER_POWER, CHROMA_SMOOTHING_TIME, DISPLAY_GAMMA, NEUTRAL_LUMA,
)
from .filters import (
    forward_transform, inverse_transform, reverse_samples,
    band_pass, notch, fractional_shift, differentiate, smoothing_filter,
)
from .imaging import new_rgba
from .modulation import demodulate
from .timing import scanline_timing, scanline_states


def _recover_chroma(spectrum, sample_rate, channel, resonance, blend):
    """Demodulate one chroma channel from the band-limited spectrum.

    The discriminator output is divided by the smoothed subcarrier power,
    which makes it depend on instantaneous frequency alone: carriers the
    envelope filter rolls off, or a weak received signal, keep their value.
    Below CHROMA_LIMITER_POWER the output fades to zero instead.
    """
    band = band_pass(spectrum, sample_rate, channel.band_center,
                     channel.band_width, resonance, blend)
    offset = -channel.recenter_frequency / sample_rate * len(band)
    band = fractional_shift(band, offset)
    slope = differentiate(band, sample_rate)
    analytic = inverse_transform(band)
    cutoff = 1.0 / (2.0 * CHROMA_SMOOTHING_TIME)
    discriminated = smoothing_filter(
        demodulate(analytic, inverse_transform(slope), channel.deviation),
        sample_rate, cutoff)
    power = smoothing_filter(np.abs(analytic) ** 2, sample_rate, cutoff)
    with np.errstate(invalid='ignore'):
        return discriminated / np.maximum(power, CHROMA_LIMITER_POWER)


def _recover_luma(spectrum, sample_rate, config, resonance, blend):
    """Real luma: band-limited to the main bandwidth, subcarriers notched out.

    Both filters act on |f|, so the positive and negative halves of the
    real signal's spectrum are treated alike and detail keeps its amplitude.
    """
    spectrum = band_pass(spectrum, sample_rate, 0.0, 2.0 * config.main_bandwidth,
                         resonance)
    chroma_center = ((config.chroma_bandwidth_high - config.chroma_bandwidth_low) / 2.0
                     + config.chroma_carrier)
    spectrum = notch(spectrum, sample_rate, chroma_center,
                     config.chroma_bandwidth_low + config.chroma_bandwidth_high,
                     resonance, blend, symmetric=True)
    return inverse_transform(spectrum).real


def _pair_lines(states, lines):
    """Signal line each scanline reads its Db and Dr from.

    A line pair shares chroma: Db comes from the even line, Dr from the odd
    one. A trailing even line with no partner reads Dr from the line before.
    """
    index = np.array([s.index for s in states])
    even = np.array([s.channel == 0 for s in states])
    db_line = np.where(even, index, index - 1)
    dr_line = np.where(even, index + 1, index)
    dr_line = np.where(dr_line >= lines, index - 1, dr_line)
    return np.clip(db_line, 0, lines - 1), np.clip(dr_line, 0, lines - 1)


def _jitter_offsets(jitter, active_width, lines, rng):
    """Per-line horizontal sync error in samples."""
    if jitter == 0:
        return np.zeros(lines, dtype=np.int64)
    rng = np.random.default_rng(rng)
    noise = 2.0 * (rng.random(lines) - 0.5)
    return np.trunc(jitter * noise * active_width).astype(np.int64)


def ydbdr_to_display(ydbdr, config=SECAM):
    """Convert Y, Db, Dr (... x 3) to display RGB uint8.

    Non-finite values are zeroed and everything is clamped before the
    display gamma is applied.
    """
    rgb = ydbdr @ config.ydbdr_to_rgb.T
    rgb = np.nan_to_num(rgb, nan=0.0, posinf=1.0, neginf=0.0)
    np.clip(rgb, 0.0, 1.0, out=rgb)
    return (rgb ** DISPLAY_GAMMA * 255.0).astype(np.uint8)


def decode_frame(signal, active_width, config=SECAM, crosstalk=0.0,
                 resonance=1.0, jitter=0.0, channel_mask=ALL_CHANNELS, rng=None):
    """Decode one frame of composite SECAM signal to an RGBA image.

    Args:
        signal: 1D composite signal for one frame.
        active_width: Active samples per line (output width).
        config: Format configuration.
        crosstalk: 0 separates luma and chroma bands perfectly, 1 not at all.
        resonance: Filter steepness; higher is sharper.
        jitter: Horizontal sync instability as a fraction of active width.
        channel_mask: Bit flags of channels to keep (1 = Y, 2 = Db, 4 = Dr).
            Masked luma is held at mid-gray, masked chroma at zero.
        rng: Seed or numpy Generator driving the jitter.

    Returns:
        RGBA image (total_scanlines x active_width x 4, uint8).
    """
    check_standard(config)
    signal = np.asarray(signal, dtype=np.float64)
    if signal.ndim != 1 or signal.size == 0:
        raise ValueError(f"Signal must be a non-empty 1D array, got shape {signal.shape}")
    if active_width <= 0:
        raise ValueError(f"active_width must be positive, got {active_width}")
    if not 0 <= channel_mask <= ALL_CHANNELS:
        raise ValueError(f"channel_mask must be in 0..{ALL_CHANNELS}, got {channel_mask}")

    lines = config.total_scanlines
    length = len(signal)
    sample_rate = length / config.frame_time
    timing = scanline_timing(length, lines, config.line_ratio, active_width)
    blend = 1.0 - crosstalk

    spectrum = forward_transform(signal)

    # Chroma is taken from the broadcast envelope (main sideband plus vestige)
    # as an analytic, one-sided signal.
    envelope = band_pass(spectrum, sample_rate,
                         (config.main_bandwidth - config.side_bandwidth) / 2.0,
                         config.main_bandwidth + config.side_bandwidth, resonance)
    db, dr = (_recover_chroma(envelope, sample_rate, ch, resonance, blend)
              for ch in config.chroma_channels)
    luma = _recover_luma(spectrum, sample_rate, config, resonance, blend)

    luma, db, dr = (reverse_samples(x) for x in (luma, db, dr))

    states = scanline_states(lines, config.interlaced)
    rows = np.array([s.row for s in states])
    db_line, dr_line = _pair_lines(states, lines)

    offsets = _jitter_offsets(jitter, active_width, lines, rng)
    cols = np.arange(active_width)
    starts = timing.active_starts
    y_idx = np.clip((starts + offsets)[:, None] + cols, 0, length - 1)
    db_idx = np.clip((starts[db_line] + offsets)[:, None] + cols, 0, length - 1)
    dr_idx = np.clip((starts[dr_line] + offsets)[:, None] + cols, 0, length - 1)

    shape = (lines, active_width)
    y = luma[y_idx] if channel_mask & LUMA_CHANNEL else np.full(shape, NEUTRAL_LUMA)
    u = db[db_idx] if channel_mask & DB_CHANNEL else np.zeros(shape)
    v = dr[dr_idx] if channel_mask & DR_CHANNEL else np.zeros(shape)

    output = new_rgba(lines, active_width)
    output[rows, :, :3] = ydbdr_to_display(np.stack([y, u, v], axis=-1), config)
    return output
