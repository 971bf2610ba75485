"""Image buffer helpers over (H, W, C) uint8 numpy arrays."""

import cv2
import numpy as np


def as_rgb(image):
    """Validate an RGB or RGBA uint8 image and return its RGB planes."""
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an H x W x 3 or H x W x 4 image, got shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Image must not be empty, got shape {image.shape}")
    return image[:, :, :3]


def resize_rows(image, rows):
    """Resample an image vertically to ``rows`` rows, keeping its width.

    Uses area (supersampling) interpolation.
    """
    if image.shape[0] == rows:
        return image
    width = image.shape[1]
    return cv2.resize(np.ascontiguousarray(image), (width, rows),
                      interpolation=cv2.INTER_AREA)


def new_rgba(rows, width):
    """Blank opaque RGBA image."""
    image = np.zeros((rows, width, 4), dtype=np.uint8)
    image[:, :, 3] = 255
    return image
