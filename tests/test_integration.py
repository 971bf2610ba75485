"""Integration tests: encode-then-decode roundtrips."""

import numpy as np
import pytest

from conftest import ACTIVE_WIDTH, interior, solid_frame
from secam_simulator.colorbars import generate_colorbars, EBU_BARS
from secam_simulator.config import SECAM
from secam_simulator.constants import DISPLAY_GAMMA, LUMA_CHANNEL
from secam_simulator.decoder import decode_frame
from secam_simulator.encoder import encode_frame
from secam_simulator.pipeline import SignalPipeline
from secam_simulator.effects import add_noise, add_attenuation
from secam_simulator.timing import signal_length, scanline_timing


# Mean per-channel error allowed on a solid color, in 8-bit levels. The display
# gamma stretches residues near black, so channels at 0 carry most of it.
COLOR_TOLERANCE = 12


def _error(decoded, color):
    return np.abs(decoded[:, :, :3].astype(np.float64) - np.array(color)).mean()


def _grating_signal(frequency, amplitude=0.3):
    """Luma-only frame: a horizontal sine grating around mid level on every line."""
    length = signal_length(ACTIVE_WIDTH, SECAM)
    timing = scanline_timing(length, SECAM.total_scanlines, SECAM.line_ratio, ACTIVE_WIDTH)
    t = np.arange(ACTIVE_WIDTH) * SECAM.active_time / ACTIVE_WIDTH
    signal = np.zeros(length)
    signal[timing.active_starts[:, None] + np.arange(ACTIVE_WIDTH)] = (
        0.5 + amplitude * np.sin(2.0 * np.pi * frequency * t))
    return signal


def _ramp_frame():
    ramp = np.linspace(0, 255, ACTIVE_WIDTH).astype(np.uint8)
    return np.repeat(ramp[None, :, None], 3, axis=2).repeat(32, axis=0)


class TestRoundtrip:
    def test_gray_roundtrip(self, gray_signal):
        """Mid-gray survives encode and decode to within a few levels."""
        decoded = decode_frame(gray_signal, ACTIVE_WIDTH)
        mean_color = interior(decoded).mean(axis=(0, 1))
        np.testing.assert_allclose(mean_color, 128, atol=5)

    def test_gray_roundtrip_is_neutral(self, gray_signal):
        decoded = decode_frame(gray_signal, ACTIVE_WIDTH)
        mean_color = interior(decoded).mean(axis=(0, 1))
        assert mean_color.max() - mean_color.min() < 6

    def test_white_roundtrip(self):
        decoded = decode_frame(encode_frame(solid_frame((255, 255, 255))), ACTIVE_WIDTH)
        assert interior(decoded).mean() > 235

    def test_red_roundtrip(self, red_signal):
        """Solid red decodes with red dominant and green/blue suppressed."""
        decoded = decode_frame(red_signal, ACTIVE_WIDTH)
        r, g, b = interior(decoded).mean(axis=(0, 1))
        assert r > 200
        assert g < 60
        assert b < 60

    @pytest.mark.parametrize("color", [tuple(int(v) for v in bar) for bar in EBU_BARS])
    def test_primaries_and_secondaries(self, color):
        """Every EBU bar color survives a clean roundtrip within tolerance."""
        decoded = decode_frame(encode_frame(solid_frame(color)), ACTIVE_WIDTH)
        mean_color = interior(decoded, margin=0.25).mean(axis=(0, 1))
        np.testing.assert_allclose(mean_color, color, atol=COLOR_TOLERANCE)

    def test_blue_roundtrip(self):
        decoded = decode_frame(encode_frame(solid_frame((0, 0, 255))), ACTIVE_WIDTH)
        r, g, b = interior(decoded).mean(axis=(0, 1))
        assert b > r + 200
        assert b > g + 200

    def test_colorbars_shape(self, colorbars_frame):
        decoded = decode_frame(encode_frame(colorbars_frame), ACTIVE_WIDTH)
        assert decoded.shape == (625, ACTIVE_WIDTH, 4)
        assert decoded.dtype == np.uint8

    def test_colorbars_white_and_black_bars(self, colorbars_frame):
        decoded = decode_frame(encode_frame(colorbars_frame), ACTIVE_WIDTH)
        bar = ACTIVE_WIDTH // len(EBU_BARS)
        rows = slice(100, 500)
        white = decoded[rows, bar // 3:2 * bar // 3, :3]
        black = decoded[rows, 7 * bar + bar // 3:7 * bar + 2 * bar // 3, :3]
        assert white.mean() > 200
        assert black.mean() < 50

    def test_colorbars_from_generator(self):
        bars = generate_colorbars(ACTIVE_WIDTH, 288)
        decoded = decode_frame(encode_frame(bars), ACTIVE_WIDTH)
        assert decoded[:, :, :3].mean() > 10


class TestDegradation:
    def test_crosstalk_degrades_monotonically(self, gray_signal):
        errors = [_error(interior(decode_frame(gray_signal, ACTIVE_WIDTH, crosstalk=c)), 128)
                  for c in (0.0, 0.2, 1.0)]
        assert errors[0] <= errors[1] <= errors[2]
        assert errors[2] > errors[0] + 5

    def test_jitter_degrades(self, gray_signal):
        clean = decode_frame(gray_signal, ACTIVE_WIDTH, jitter=0.0)
        shaky = decode_frame(gray_signal, ACTIVE_WIDTH, jitter=0.1, rng=4)
        assert _error(shaky, 128) > _error(clean, 128)

    def test_saturated_crosstalk_degrades_monotonically(self):
        blue = (0, 0, 255)
        signal = encode_frame(solid_frame(blue))
        errors = [_error(interior(decode_frame(signal, ACTIVE_WIDTH, crosstalk=c)), blue)
                  for c in (0.0, 0.1, 0.3, 0.6, 1.0)]
        assert all(a <= b for a, b in zip(errors, errors[1:]))
        assert errors[-1] > errors[0] + 50

    def test_jitter_degrades_monotonically(self):
        signal = encode_frame(_ramp_frame())
        steady = decode_frame(signal, ACTIVE_WIDTH)[:, :, :3].astype(np.float64)
        errors = [
            np.abs(decode_frame(signal, ACTIVE_WIDTH, jitter=j, rng=9)[:, :, :3] - steady).mean()
            for j in (0.0, 0.01, 0.05, 0.1, 0.3)
        ]
        assert errors[0] == 0
        assert all(a < b for a, b in zip(errors, errors[1:]))

    def test_noise_degrades(self, gray_signal):
        clean = decode_frame(gray_signal, ACTIVE_WIDTH)
        noisy = decode_frame(add_noise(0.1, rng=0)(gray_signal, 1.0), ACTIVE_WIDTH)
        assert interior(noisy).std() > interior(clean).std()


class TestLumaDetail:
    def _amplitude(self, frequency):
        decoded = decode_frame(_grating_signal(frequency), ACTIVE_WIDTH,
                               channel_mask=LUMA_CHANNEL)
        luma = (interior(decoded)[:, :, 0] / 255.0) ** (1.0 / DISPLAY_GAMMA)
        return (luma.max() - luma.min()) / 2.0

    def test_fine_detail_keeps_amplitude(self):
        coarse = self._amplitude(0.08e6)
        fine = self._amplitude(1.73e6)
        assert coarse == pytest.approx(0.3, abs=0.02)
        assert fine == pytest.approx(0.3, abs=0.02)
        assert fine > 0.9 * coarse

    def test_detail_near_band_edge(self):
        assert self._amplitude(3.0e6) > 0.25


class TestPipelineRoundtrip:
    def test_roundtrip_with_effects(self, gray_signal):
        """Roundtrip with noise and attenuation still produces valid output."""
        pipeline = SignalPipeline()
        pipeline.add(add_noise(0.02, rng=1))
        pipeline.add(add_attenuation(0.1))
        decoded = decode_frame(pipeline.process(gray_signal), ACTIVE_WIDTH)
        assert decoded.shape == (625, ACTIVE_WIDTH, 4)
        assert decoded[:, :, :3].max() > 0

    def test_attenuation_darkens(self, gray_signal):
        faded = SignalPipeline.from_effects({'attenuation': {'strength': 0.5}})
        clean = decode_frame(gray_signal, ACTIVE_WIDTH)
        dark = decode_frame(faded.process(gray_signal), ACTIVE_WIDTH)
        assert interior(dark).mean() < interior(clean).mean() - 10

    def test_ghost_changes_picture(self, colorbars_frame):
        signal = encode_frame(colorbars_frame)
        ghosted = SignalPipeline.from_effects({'ghost': {'amplitude': 0.4, 'delay_us': 3.0}})
        clean = decode_frame(signal, ACTIVE_WIDTH)
        echoed = decode_frame(ghosted.process(signal), ACTIVE_WIDTH)
        assert not np.array_equal(clean, echoed)

    @pytest.mark.parametrize("seed", [0, 1])
    def test_seeded_roundtrip_reproducible(self, gray_signal, seed):
        def run():
            pipeline = SignalPipeline.from_effects({'noise': {'amplitude': 0.05, 'rng': seed}})
            return decode_frame(pipeline.process(gray_signal), ACTIVE_WIDTH,
                                jitter=0.01, rng=seed)
        np.testing.assert_array_equal(run(), run())
