"""
Headless feature extraction - no GUI windows, just saves results
Usage: python extract_features.py <path_to_image> [config.yaml]
"""

import sys
from pathlib import Path

from polyimage import PolyImage, PolyImageError, load_config
from polyimage.utils.io_handler import load_image, save_features, save_image
from polyimage.utils.logger import create_session_log_file, setup_logger
from polyimage.utils.visualization import render_feature_map


def main():
    """Extract descriptors from one image and save them."""
    if len(sys.argv) < 2:
        print("Usage: python extract_features.py <path_to_image> [config.yaml]")
        sys.exit(1)

    image_path = Path(sys.argv[1])
    config = load_config(sys.argv[2] if len(sys.argv) > 2 else None)

    log_file = config['logging']['log_file'] or create_session_log_file()
    logger = setup_logger('polyimage', config['logging']['level'], log_file)

    try:
        image = load_image(image_path)
        poly = PolyImage.from_config(config)
        poly.load(image)
    except (ValueError, PolyImageError) as e:
        logger.error(f"Extraction failed for {image_path}: {e}")
        sys.exit(1)

    logger.info(f"Image size: {image.shape[1]} x {image.shape[0]} pixels")
    logger.info(f"Configuration: {poly!r}")
    logger.info(f"Extracted {poly.size} descriptors of {poly.num_dimensions} dims")

    output_dir = Path("output")
    save_features(poly, output_dir / f"{image_path.stem}_features.npz")
    save_image(render_feature_map(poly.features), output_dir / f"{image_path.stem}_map.png")
    logger.info(f"Results saved to {output_dir}/")


if __name__ == "__main__":
    main()
