"""
Tests for the pixel buffer.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose
from PIL import Image

from mvs_camera.bitmap import Bitmap


class TestBitmap:
    """Tests for bitmap dimensions and resampling."""

    def test_empty(self):
        bitmap = Bitmap()

        assert bitmap.data is None
        assert bitmap.width == 0
        assert bitmap.height == 0
        assert bitmap.channels == 0

    def test_dimensions(self):
        bitmap = Bitmap(np.zeros((30, 40, 3), dtype=np.uint8))

        assert bitmap.width == 40
        assert bitmap.height == 30
        assert bitmap.channels == 3

    def test_invalid_shape(self):
        with pytest.raises(ValueError):
            Bitmap(np.zeros(10))

    def test_invalid_resample(self):
        with pytest.raises(ValueError):
            Bitmap(np.zeros((4, 4)), resample='cubic-spline')

    def test_rescale_empty(self):
        with pytest.raises(ValueError):
            Bitmap().rescale(10, 10)

    def test_rescale_gray(self):
        bitmap = Bitmap(np.full((30, 40), 200, dtype=np.uint8))
        bitmap.rescale(20, 15)

        assert bitmap.data.shape == (15, 20)
        assert bitmap.data.dtype == np.uint8
        assert_allclose(bitmap.data, 200, atol=1)

    def test_rescale_rgb(self):
        data = np.zeros((30, 40, 3), dtype=np.uint8)
        data[..., 0] = 10
        data[..., 1] = 20
        data[..., 2] = 30
        bitmap = Bitmap(data)
        bitmap.rescale(80, 60)

        assert bitmap.data.shape == (60, 80, 3)
        assert_allclose(bitmap.data[30, 40], [10, 20, 30], atol=1)

    def test_rescale_float_preserves_dtype(self):
        bitmap = Bitmap(np.full((16, 16), 2.5, dtype=np.float32))
        bitmap.rescale(8, 8)

        assert bitmap.data.dtype == np.float32
        assert_allclose(bitmap.data, 2.5, rtol=1e-5)

    def test_rescale_uint16(self):
        bitmap = Bitmap(np.full((10, 10), 60000, dtype=np.uint16), resample='nearest')
        bitmap.rescale(5, 5)

        assert bitmap.data.dtype == np.uint16
        assert np.all(bitmap.data == 60000)

    def test_from_image(self):
        img = Image.new('RGB', (12, 8), color=(1, 2, 3))
        bitmap = Bitmap.from_image(img)

        assert (bitmap.width, bitmap.height, bitmap.channels) == (12, 8, 3)

    def test_copy_is_independent(self):
        bitmap = Bitmap(np.zeros((8, 12), dtype=np.uint8), resample='nearest')
        duplicate = bitmap.copy()
        duplicate.rescale(6, 4)

        assert (bitmap.width, bitmap.height) == (12, 8)
        assert (duplicate.width, duplicate.height) == (6, 4)
        assert duplicate.resample == 'nearest'

    def test_copy_empty(self):
        assert Bitmap().copy().data is None
