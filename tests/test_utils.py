"""Tests for utility modules."""

import logging

import pytest
import numpy as np
from polyimage import PolyImage, Rectangle
from polyimage.utils.io_handler import load_features, load_image, save_features, save_image
from polyimage.utils.logger import create_session_log_file, setup_logger
from polyimage.utils.visualization import draw_block_rects, render_feature_map


class TestLogger:
    """Test logging setup."""

    def test_setup_logger(self):
        """Test logger level and console handler."""
        logger = setup_logger('polyimage.test_console', logging.DEBUG)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_no_duplicate_handlers(self):
        """Test repeated setup reuses handlers."""
        setup_logger('polyimage.test_repeat')
        logger = setup_logger('polyimage.test_repeat')
        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        """Test messages reach the log file."""
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logger('polyimage.test_file', log_file=str(log_file))
        logger.info("extraction finished")
        for handler in logger.handlers:
            handler.flush()
        assert "extraction finished" in log_file.read_text()

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_session_log_file(self, tmp_path):
        """Test timestamped log path."""
        path = create_session_log_file(str(tmp_path))
        assert path.startswith(str(tmp_path))
        assert path.endswith(".log")
        assert "polyimage_" in path


class TestIOHandler:
    """Test image and feature I/O."""

    def test_image_roundtrip(self, tmp_path):
        """Test saving and loading a grayscale image."""
        image = np.random.randint(0, 256, (32, 48), dtype=np.uint8)
        path = tmp_path / "out" / "image.png"
        save_image(image, path)
        loaded = load_image(path)
        assert np.array_equal(loaded, image)

    def test_load_grayscale(self, tmp_path):
        """Test decoding a colour image to gray."""
        image = np.full((16, 16, 3), 120, dtype=np.uint8)
        path = tmp_path / "color.png"
        save_image(image, path)
        assert load_image(path, grayscale=True).shape == (16, 16)
        assert load_image(path).shape == (16, 16, 3)

    def test_load_missing_image(self, tmp_path):
        """Test a missing image raises."""
        with pytest.raises(ValueError):
            load_image(tmp_path / "missing.png")

    def test_features_roundtrip(self, tmp_path):
        """Test saving and loading a feature grid."""
        poly = PolyImage(2, 5, downsample=2)
        poly.load(np.random.uniform(10, 20, (24, 30)))
        path = tmp_path / "features.npz"
        save_features(poly, path)

        data = load_features(path)
        assert np.array_equal(data['features'], poly.features)
        assert data['order'] == 2
        assert data['window_size'] == 5
        assert data['downsample'] == 2


class TestVisualization:
    """Test visualization helpers."""

    def test_render_feature_map(self):
        """Test heat map shape and type."""
        features = np.random.uniform(-1, 1, (10, 12, 5))
        heat_map = render_feature_map(features, component=3)
        assert heat_map.shape == (10, 12, 3)
        assert heat_map.dtype == np.uint8

    def test_render_non_finite(self):
        """Test NaN and inf are tolerated."""
        features = np.zeros((4, 4, 2))
        features[0, 0, 0] = np.nan
        features[1, 1, 0] = np.inf
        features[2, 2, 0] = 1.0
        heat_map = render_feature_map(features)
        assert heat_map.shape == (4, 4, 3)

    def test_render_empty_grid(self):
        """Test an unloaded grid renders to an empty image."""
        assert render_feature_map(PolyImage().features).shape == (0, 0, 3)

    def test_render_bad_component(self):
        """Test component bounds."""
        with pytest.raises(IndexError):
            render_feature_map(np.zeros((3, 3, 2)), component=2)
        with pytest.raises(ValueError):
            render_feature_map(np.zeros((3, 3)))

    def test_draw_block_rects(self):
        """Test rectangles are drawn on a copy."""
        image = np.zeros((20, 20), dtype=np.uint8)
        output = draw_block_rects(image, [Rectangle(2, 3, 8, 9)], color=(0, 255, 0))
        assert output.shape == (20, 20, 3)
        assert tuple(output[3, 2]) == (0, 255, 0)
        assert tuple(output[6, 5]) == (0, 0, 0)
        assert image.sum() == 0
