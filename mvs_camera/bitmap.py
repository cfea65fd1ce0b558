"""
In-memory pixel buffer attached to an image.

A Bitmap wraps an (H, W) or (H, W, C) numpy array. Resampling is done one
channel at a time with Pillow so that any channel count and the float32
buffers used for depth and normal maps are supported.
"""

import numpy as np
from PIL import Image
from typing import Optional
import logging

logger = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    'nearest': Image.Resampling.NEAREST,
    'bilinear': Image.Resampling.BILINEAR,
    'bicubic': Image.Resampling.BICUBIC,
    'lanczos': Image.Resampling.LANCZOS,
}


class Bitmap:
    """
    Pixel buffer with width, height and an in-place rescale.

    An empty Bitmap (no data) represents an image without attached pixels.
    """

    def __init__(self, data: Optional[np.ndarray] = None, resample: str = 'bilinear'):
        """
        Args:
            data: Pixel array of shape (H, W) or (H, W, C), or None
            resample: Name of the resampling filter used by `rescale`
        """
        if resample not in RESAMPLE_FILTERS:
            raise ValueError(
                f"Unknown resample filter '{resample}', "
                f"expected one of {sorted(RESAMPLE_FILTERS)}"
            )
        if data is not None:
            data = np.asarray(data)
            if data.ndim not in (2, 3):
                raise ValueError(f"Bitmap data must be 2D or 3D, got shape {data.shape}")
        self._data = data
        self.resample = resample

    @classmethod
    def from_image(cls, image: Image.Image, resample: str = 'bilinear') -> "Bitmap":
        """Create a bitmap from a Pillow image."""
        return cls(np.asarray(image), resample=resample)

    @property
    def data(self) -> Optional[np.ndarray]:
        return self._data

    @property
    def width(self) -> int:
        return 0 if self._data is None else self._data.shape[1]

    @property
    def height(self) -> int:
        return 0 if self._data is None else self._data.shape[0]

    @property
    def channels(self) -> int:
        if self._data is None:
            return 0
        return 1 if self._data.ndim == 2 else self._data.shape[2]

    def copy(self) -> "Bitmap":
        """Return a bitmap with its own copy of the pixels."""
        data = None if self._data is None else self._data.copy()
        return Bitmap(data, resample=self.resample)

    def __repr__(self) -> str:
        return f"Bitmap({self.width}x{self.height}x{self.channels})"

    def rescale(self, new_width: int, new_height: int) -> None:
        """
        Resample the pixels to the given size in place.

        Args:
            new_width: Target width in pixels
            new_height: Target height in pixels
        """
        if self._data is None:
            raise ValueError("Cannot rescale an empty bitmap")

        data = self._data
        planes = [data] if data.ndim == 2 else [data[:, :, c] for c in range(data.shape[2])]
        resized = [self._resize_plane(p, new_width, new_height) for p in planes]

        if data.ndim == 2:
            self._data = resized[0]
        else:
            self._data = np.stack(resized, axis=2)

        logger.debug(
            f"Rescaled bitmap {data.shape[1]}x{data.shape[0]} -> {new_width}x{new_height}"
        )

    def _resize_plane(self, plane: np.ndarray, new_width: int, new_height: int) -> np.ndarray:
        # Pillow handles 8-bit planes natively; everything else goes through mode 'F'
        if plane.dtype == np.uint8:
            img = Image.fromarray(np.ascontiguousarray(plane))
        else:
            img = Image.fromarray(np.ascontiguousarray(plane, dtype=np.float32))

        img = img.resize((new_width, new_height), resample=RESAMPLE_FILTERS[self.resample])
        result = np.asarray(img)

        if np.issubdtype(plane.dtype, np.integer) and plane.dtype != np.uint8:
            info = np.iinfo(plane.dtype)
            result = np.clip(np.rint(result), info.min, info.max)
        return result.astype(plane.dtype)
