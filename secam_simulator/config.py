"""Immutable analog format configurations."""

from dataclasses import dataclass, field

import numpy as np

from . import constants as c


@dataclass(frozen=True)
class SubcarrierChannel:
    """One frequency-modulated chroma channel (Db or Dr).

    Bandwidths are the extents of the channel's band below and above
    its rest frequency.
    """
    name: str
    rest_frequency: float
    deviation: float
    bandwidth_low: float
    bandwidth_high: float
    recenter_frequency: float

    @property
    def band_center(self):
        return (self.bandwidth_high - self.bandwidth_low) / 2.0 + self.rest_frequency

    @property
    def band_width(self):
        return self.bandwidth_low + self.bandwidth_high


@dataclass(frozen=True)
class FormatConfig:
    """Constant table for one analog television standard.

    ``framerate`` counts fields per second when ``interlaced`` is set, so
    a 625-line, 50-field system has a 64 us scanline.
    """
    name: str
    standard: str
    luma_weights: tuple
    db_max: float
    dr_max: float
    chroma_phase: float
    main_bandwidth: float
    side_bandwidth: float
    chroma_bandwidth_low: float
    chroma_bandwidth_high: float
    chroma_carrier: float
    total_scanlines: int
    visible_scanlines: int
    framerate: float
    active_time: float
    interlaced: bool
    chroma_channels: tuple = field(default=())

    def __post_init__(self):
        if self.total_scanlines <= 0:
            raise ValueError(f"total_scanlines must be positive, got {self.total_scanlines}")
        if not 0 < self.visible_scanlines <= self.total_scanlines:
            raise ValueError(
                f"visible_scanlines must be in 1..{self.total_scanlines}, "
                f"got {self.visible_scanlines}")
        if self.framerate <= 0:
            raise ValueError(f"framerate must be positive, got {self.framerate}")
        if not 0 < self.active_time < self.scanline_time:
            raise ValueError(
                f"active_time must be in (0, {self.scanline_time}), got {self.active_time}")

    @property
    def scanline_time(self):
        """Duration of one scanline in seconds."""
        fields = 2 if self.interlaced else 1
        return fields / (self.framerate * self.total_scanlines)

    @property
    def frame_time(self):
        """Duration of one full frame (all scanlines) in seconds."""
        return self.total_scanlines * self.scanline_time

    @property
    def line_ratio(self):
        """Scanline duration over active duration."""
        return self.scanline_time / self.active_time

    @property
    def rgb_to_ydbdr(self):
        """RGB -> (Y, Db, Dr) matrix, shape (3, 3)."""
        wr, wg, wb = self.luma_weights
        y = np.array([wr, wg, wb])
        b_minus_y = np.array([-wr, -wg, 1.0 - wb]) * (self.db_max / (1.0 - wb))
        r_minus_y = np.array([1.0 - wr, -wg, -wb]) * (self.dr_max / (1.0 - wr))
        cos_p, sin_p = np.cos(self.chroma_phase), np.sin(self.chroma_phase)
        return np.array([
            y,
            cos_p * b_minus_y - sin_p * r_minus_y,
            sin_p * b_minus_y + cos_p * r_minus_y,
        ])

    @property
    def ydbdr_to_rgb(self):
        """(Y, Db, Dr) -> RGB matrix, shape (3, 3).

        Built in closed form so the luma column is exactly one and a
        colorless input decodes to R == G == B.
        """
        wr, wg, wb = self.luma_weights
        kb = (1.0 - wb) / self.db_max
        kr = (1.0 - wr) / self.dr_max
        base = np.array([
            [1.0, 0.0, kr],
            [1.0, -wb * kb / wg, -wr * kr / wg],
            [1.0, kb, 0.0],
        ])
        cos_p, sin_p = np.cos(self.chroma_phase), np.sin(self.chroma_phase)
        unrotate = np.array([
            [1.0, 0.0, 0.0],
            [0.0, cos_p, sin_p],
            [0.0, -sin_p, cos_p],
        ])
        return base @ unrotate


SECAM_DB = SubcarrierChannel(
    name='Db',
    rest_frequency=c.DB_REST_FREQ,
    deviation=c.DB_DEVIATION,
    bandwidth_low=c.DB_BW_LOW,
    bandwidth_high=c.DB_BW_HIGH,
    recenter_frequency=c.DB_RECENTER_FREQ,
)

SECAM_DR = SubcarrierChannel(
    name='Dr',
    rest_frequency=c.DR_REST_FREQ,
    deviation=c.DR_DEVIATION,
    bandwidth_low=c.DR_BW_LOW,
    bandwidth_high=c.DR_BW_HIGH,
    recenter_frequency=c.DR_RECENTER_FREQ,
)

SECAM = FormatConfig(
    name='SECAM',
    standard='secam',
    luma_weights=c.LUMA_WEIGHTS,
    db_max=c.DB_MAX,
    dr_max=c.DR_MAX,
    chroma_phase=c.CHROMA_PHASE,
    main_bandwidth=c.MAIN_BANDWIDTH,
    side_bandwidth=c.SIDE_BANDWIDTH,
    chroma_bandwidth_low=c.CHROMA_BW_LOW,
    chroma_bandwidth_high=c.CHROMA_BW_HIGH,
    chroma_carrier=c.CHROMA_CARRIER,
    total_scanlines=c.TOTAL_LINES,
    visible_scanlines=c.VISIBLE_LINES,
    framerate=c.FIELD_RATE,
    active_time=c.ACTIVE_TIME,
    interlaced=c.INTERLACED,
    chroma_channels=(SECAM_DB, SECAM_DR),
)

_FORMATS = {'secam': SECAM}


def get_format(name):
    """Look up a format configuration by name (case-insensitive)."""
    try:
        return _FORMATS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown format: {name}") from None


def check_standard(config):
    """Reject configurations whose chroma scheme the SECAM codec does not implement."""
    if config.standard != 'secam' or len(config.chroma_channels) != 2:
        raise ValueError(f"Unsupported format for SECAM codec: {config.name}")
