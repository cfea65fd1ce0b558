"""
Image geometry module.

An ImageGeometry combines a camera model with the image path, its pixel
dimensions and an optional pixel buffer. Rescaling keeps the intrinsic
matrix, the stored dimensions and the buffer consistent with each other.
"""

import math
import numpy as np
from typing import Optional, Tuple
import logging

from .bitmap import Bitmap
from .camera import CameraModel, CameraSnapshot
from .projection import ArrayLike, ProjectionMatrices
from .rotation import rotate_camera

logger = logging.getLogger(__name__)


class DimensionMismatchError(AssertionError):
    """Raised when an attached bitmap does not match the image dimensions."""
    pass


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halfway cases away from zero."""
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


class ImageGeometry:
    """
    Camera geometry of a single image in a multi-view stereo reconstruction.

    The stored width and height are the source of truth; an attached bitmap
    must always agree with them.

    Example usage:
        image = ImageGeometry("img_0001.jpg", 1280, 960, K, R, T)
        image.set_last_row([0, 0, 0, 1])
        image.downsize(640, 640)
        snapshot = image.rotate_90_multi(1)
    """

    def __init__(
        self,
        path: str,
        width: int,
        height: int,
        K: ArrayLike,
        R: ArrayLike,
        T: ArrayLike,
    ):
        """
        Initialize image geometry.

        Args:
            path: Path of the image file (metadata only, never read)
            width: Image width in pixels
            height: Image height in pixels
            K: 3x3 intrinsic matrix
            R: 3x3 world-to-camera rotation
            T: World-to-camera translation
        """
        self._path = path
        self._width = int(width)
        self._height = int(height)
        self._camera = CameraModel(K, R, T)
        self._bitmap = Bitmap()

    def __repr__(self) -> str:
        return f"ImageGeometry('{self._path}', {self._width}x{self._height}, {self._camera!r})"

    @property
    def path(self) -> str:
        return self._path

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def camera(self) -> CameraModel:
        return self._camera

    @property
    def bitmap(self) -> Bitmap:
        """Copy of the attached pixel buffer."""
        return self._bitmap.copy()

    def set_bitmap(self, bitmap: Bitmap) -> None:
        """
        Attach a copy of a pixel buffer.

        Raises:
            DimensionMismatchError: If the bitmap size differs from the image size
        """
        if bitmap.width != self._width or bitmap.height != self._height:
            raise DimensionMismatchError(
                f"Bitmap size {bitmap.width}x{bitmap.height} does not match "
                f"image size {self._width}x{self._height} for {self._path}"
            )
        self._bitmap = bitmap.copy()

    def rescale(self, factor_x: float, factor_y: Optional[float] = None) -> None:
        """
        Resize the image by independent horizontal and vertical factors.

        The target dimensions are rounded to integers and the intrinsics are
        scaled by the realized ratios (new size / old size), not by the
        requested factors, so that K matches the resampled buffer.

        Args:
            factor_x: Horizontal scale factor
            factor_y: Vertical scale factor (defaults to factor_x)
        """
        if factor_y is None:
            factor_y = factor_x

        new_width = _round_half_away(float(np.float32(self._width) * np.float32(factor_x)))
        new_height = _round_half_away(float(np.float32(self._height) * np.float32(factor_y)))
        if new_width < 1 or new_height < 1:
            raise ValueError(
                f"Rescale of {self._path} by ({factor_x}, {factor_y}) gives empty "
                f"image {new_width}x{new_height}"
            )

        if self._bitmap.data is not None:
            self._bitmap.rescale(new_width, new_height)

        scale_x = float(np.float32(new_width) / np.float32(self._width))
        scale_y = float(np.float32(new_height) / np.float32(self._height))
        self._camera.scale_intrinsics(scale_x, scale_y)

        logger.debug(
            f"Rescaled {self._path}: {self._width}x{self._height} -> "
            f"{new_width}x{new_height} (scale {scale_x:.6g}, {scale_y:.6g})"
        )
        self._width = new_width
        self._height = new_height

    def downsize(self, max_width: int, max_height: int) -> None:
        """
        Shrink the image uniformly so that it fits within the given bounds.

        Does nothing if the image already fits.
        """
        if self._width <= max_width and self._height <= max_height:
            return
        factor_x = np.float32(max_width) / np.float32(self._width)
        factor_y = np.float32(max_height) / np.float32(self._height)
        self.rescale(float(min(factor_x, factor_y)))

    # Camera queries

    def set_last_row(self, last_row: ArrayLike) -> None:
        self._camera.set_last_row(last_row)

    def get_depth(self, x: float, y: float, z: float) -> np.float32:
        return self._camera.get_depth(x, y, z)

    def get_C(self) -> np.ndarray:
        return self._camera.get_C()

    def get_P_inv_P(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._camera.get_P_inv_P()

    def get_P_inv_P_double(self) -> ProjectionMatrices:
        return self._camera.get_P_inv_P_double()

    def original(self) -> CameraSnapshot:
        return self._camera.original()

    def rotate_90_multi(self, cnt: int) -> CameraSnapshot:
        """
        Camera parameters for this image rotated clockwise by cnt * 90°.

        Args:
            cnt: Number of clockwise 90° rotations (reduced modulo 4)
        """
        return rotate_camera(self._camera, self._width, self._height, cnt)

    def rotate_90(self) -> CameraSnapshot:
        return self.rotate_90_multi(1)

    def rotate_180(self) -> CameraSnapshot:
        return self.rotate_90_multi(2)

    def rotate_270(self) -> CameraSnapshot:
        return self.rotate_90_multi(3)
