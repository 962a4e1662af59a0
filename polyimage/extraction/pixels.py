"""Reduce input images to a single float64 intensity channel."""

import cv2
import numpy as np

from polyimage.errors import UnsupportedPixelFormat

# Channel counts that carry an alpha plane (gray+alpha, BGRA)
ALPHA_CHANNELS = (2, 4)

# dtypes cv2.cvtColor accepts directly
_CVT_DTYPES = (np.uint8, np.uint16, np.float32)


def has_alpha(image: np.ndarray) -> bool:
    """Check whether an image array carries an alpha channel."""
    return image.ndim == 3 and image.shape[2] in ALPHA_CHANNELS


def to_intensity(image) -> np.ndarray:
    """
    Convert an image to a 2-D float64 intensity array.

    Args:
        image: Grayscale (H, W) / (H, W, 1) or BGR (H, W, 3) image

    Returns:
        New C-contiguous (H, W) float64 array

    Raises:
        UnsupportedPixelFormat: For alpha images, other channel counts,
            ranks other than 2 or 3, or non-numeric pixel types
    """
    image = np.asarray(image)

    if image.dtype == np.bool_:
        image = image.astype(np.uint8)
    elif not (np.issubdtype(image.dtype, np.integer) or np.issubdtype(image.dtype, np.floating)):
        raise UnsupportedPixelFormat(f"Unsupported pixel dtype: {image.dtype}")

    if image.ndim == 2:
        gray = image
    elif image.ndim == 3:
        channels = image.shape[2]
        if has_alpha(image):
            raise UnsupportedPixelFormat(
                f"Images with an alpha channel are not supported ({channels} channels)")
        if channels == 1:
            gray = image[:, :, 0]
        elif channels == 3 and image.size == 0:
            gray = np.zeros(image.shape[:2])
        elif channels == 3:
            if image.dtype.type not in _CVT_DTYPES:
                image = image.astype(np.float32)
            gray = cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_BGR2GRAY)
        else:
            raise UnsupportedPixelFormat(f"Unsupported channel count: {channels}")
    else:
        raise UnsupportedPixelFormat(f"Expected a 2-D image, got shape {image.shape}")

    # always a private writable copy, never a view of the caller's pixels
    return np.array(gray, dtype=np.float64, order='C')
