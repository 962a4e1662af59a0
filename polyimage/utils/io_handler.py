"""I/O handling for images and extracted feature grids."""

import cv2
import numpy as np
from pathlib import Path
from typing import Dict, Union


def load_image(image_path: Union[str, Path], grayscale: bool = False) -> np.ndarray:
    """
    Load image from file.

    Args:
        image_path: Path to image file
        grayscale: Decode straight to a single channel

    Returns:
        Image array as stored (BGR / BGRA / gray), or gray when requested

    Raises:
        ValueError: If the file cannot be read as an image
    """
    flags = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_UNCHANGED
    image = cv2.imread(str(image_path), flags)
    if image is None:
        raise ValueError(f"Failed to load image from {image_path}")
    return image


def save_image(image: np.ndarray, output_path: Union[str, Path]):
    """Save image to file."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(output_path), image)


def save_features(item, output_path: Union[str, Path]):
    """
    Save a loaded feature grid together with its configuration.

    Args:
        item: PolyImage with features loaded
        output_path: Destination .npz path
    """
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(
        output_path,
        features=item.features,
        order=item.order,
        window_size=item.window_size,
        downsample=item.downsample,
    )


def load_features(input_path: Union[str, Path]) -> Dict[str, Union[np.ndarray, int]]:
    """Load a feature grid saved by save_features()."""
    with np.load(input_path) as data:
        return {
            'features': data['features'],
            'order': int(data['order']),
            'window_size': int(data['window_size']),
            'downsample': int(data['downsample']),
        }
