"""Tests for secam_simulator.imaging."""

import numpy as np
import pytest

from secam_simulator.imaging import as_rgb, resize_rows, new_rgba


class TestAsRgb:
    def test_rgb_passthrough(self, sample_frame):
        np.testing.assert_array_equal(as_rgb(sample_frame), sample_frame)

    def test_rgba_drops_alpha(self, sample_frame):
        alpha = np.full(sample_frame.shape[:2] + (1,), 17, dtype=np.uint8)
        rgba = np.concatenate([sample_frame, alpha], axis=2)
        np.testing.assert_array_equal(as_rgb(rgba), sample_frame)

    def test_rejects_grayscale(self):
        with pytest.raises(ValueError, match="H x W x 3"):
            as_rgb(np.zeros((10, 10), dtype=np.uint8))

    def test_rejects_two_channels(self):
        with pytest.raises(ValueError):
            as_rgb(np.zeros((10, 10, 2), dtype=np.uint8))

    def test_rejects_empty(self):
        with pytest.raises(ValueError, match="empty"):
            as_rgb(np.zeros((0, 10, 3), dtype=np.uint8))


class TestResizeRows:
    def test_row_count(self, sample_frame):
        out = resize_rows(sample_frame, 625)
        assert out.shape == (625, sample_frame.shape[1], 3)
        assert out.dtype == np.uint8

    def test_same_rows_unchanged(self, sample_frame):
        assert resize_rows(sample_frame, sample_frame.shape[0]) is sample_frame

    def test_solid_color_preserved(self):
        frame = np.full((576, 40, 3), (10, 120, 250), dtype=np.uint8)
        out = resize_rows(frame, 625)
        assert np.all(out == np.array([10, 120, 250], dtype=np.uint8))

    def test_downsample(self):
        frame = np.zeros((100, 8, 3), dtype=np.uint8)
        assert resize_rows(frame, 10).shape == (10, 8, 3)


class TestNewRgba:
    def test_shape_and_alpha(self):
        image = new_rgba(5, 7)
        assert image.shape == (5, 7, 4)
        assert image.dtype == np.uint8
        assert np.all(image[:, :, 3] == 255)
        assert np.all(image[:, :, :3] == 0)
