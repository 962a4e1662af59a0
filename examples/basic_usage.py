"""Basic usage example for polyimage."""

import numpy as np
from polyimage import PolyImage, Point
from polyimage.utils.visualization import draw_block_rects, render_feature_map
from polyimage.utils.io_handler import save_image


def main():
    """Extract polynomial descriptors from a synthetic image."""
    # Smooth gradient with a bright blob
    rows, cols = np.mgrid[0:120, 0:160]
    image = 50 + 0.5 * cols + 80 * np.exp(-((rows - 60) ** 2 + (cols - 80) ** 2) / 200.0)
    image = image.astype(np.uint8)

    print("Extracting features...")
    poly = PolyImage(order=2, window_size=9, downsample=2)
    poly.load(image)
    print(f"Feature grid: {poly.nr} x {poly.nc}, {poly.num_dimensions} dims per descriptor")

    # Descriptor closest to the blob centre
    feat = poly.image_to_feat_space(Point(80, 60))
    print(f"Image (80, 60) -> feature {tuple(feat)}: {poly[feat.y, feat.x]}")

    # Visualize results
    heat_map = render_feature_map(poly.features, component=0)
    outlined = draw_block_rects(image, [poly.get_block_rect(feat.y, feat.x)])

    save_image(heat_map, "output/feature_x_gradient.png")
    save_image(outlined, "output/feature_block.png")
    print("Results saved to output/")


if __name__ == "__main__":
    main()
