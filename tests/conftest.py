"""Shared fixtures for SECAM simulator tests."""

import numpy as np
import pytest

from secam_simulator.colorbars import generate_colorbars
from secam_simulator.encoder import encode_frame


# Wide enough that the sample rate clears the chroma band.
ACTIVE_WIDTH = 720


def solid_frame(color, height=32, width=ACTIVE_WIDTH):
    """Solid RGB frame of the given color."""
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[:] = color
    return frame


def interior(image, margin=0.15):
    """Central region of a decoded frame, away from line edges and frame ends."""
    rows, cols = image.shape[:2]
    r0, c0 = int(rows * margin), int(cols * margin)
    return image[r0:rows - r0, c0:cols - c0, :3]


@pytest.fixture
def sample_frame():
    """Small random RGB frame at full active width."""
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, (48, ACTIVE_WIDTH, 3), dtype=np.uint8)


@pytest.fixture
def colorbars_frame():
    """EBU color bars at 720x576."""
    return generate_colorbars(ACTIVE_WIDTH, 576)


@pytest.fixture(scope='module')
def gray_signal():
    """Encoded solid mid-gray frame."""
    return encode_frame(solid_frame((128, 128, 128)))


@pytest.fixture(scope='module')
def red_signal():
    """Encoded solid red frame."""
    return encode_frame(solid_frame((255, 0, 0)))
