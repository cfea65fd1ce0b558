"""
Configuration module for MVS camera geometry.

Handles loading and saving of image camera parameters from YAML files.
"""

import yaml
import numpy as np
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from .bitmap import RESAMPLE_FILTERS, Bitmap
from .image import ImageGeometry
from .projection import as_matrix, as_vector

logger = logging.getLogger(__name__)


@dataclass
class ImageConfig:
    """
    Camera parameters of a single image.

    Matrices are stored as flat row-major lists.
    """
    path: str
    width: int
    height: int
    K: List[float]  # 9 values, row-major
    R: List[float]  # 9 values, row-major
    T: List[float]  # 3 values
    last_row: Optional[List[float]] = None  # 4 values

    def __post_init__(self):
        # Validate and flatten nested matrices
        self.K = as_matrix(self.K, 3, 3, "K").ravel().tolist()
        self.R = as_matrix(self.R, 3, 3, "R").ravel().tolist()
        self.T = as_vector(self.T, 3, "T").tolist()
        if self.last_row is not None:
            self.last_row = as_vector(self.last_row, 4, "last_row").tolist()
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")


@dataclass
class RescaleSettings:
    """Resampling options for attached bitmaps and image downsizing."""
    resample: str = 'bilinear'  # 'nearest', 'bilinear', 'bicubic' or 'lanczos'
    max_width: Optional[int] = None  # Downsize bound in pixels
    max_height: Optional[int] = None  # Downsize bound in pixels

    def __post_init__(self):
        if self.resample not in RESAMPLE_FILTERS:
            raise ValueError(f"Unknown resample filter: {self.resample}")


@dataclass
class Config:
    """
    Main configuration class.

    Attributes:
        image: Camera parameters of the image
        rescale: Resampling and downsizing options
    """
    image: ImageConfig
    rescale: RescaleSettings = field(default_factory=RescaleSettings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        img_data = data['image']
        image = ImageConfig(
            path=img_data.get('path', ''),
            width=int(img_data['width']),
            height=int(img_data['height']),
            K=img_data['K'],
            R=img_data.get('R', np.eye(3).ravel().tolist()),
            T=img_data.get('T', [0.0, 0.0, 0.0]),
            last_row=img_data.get('last_row'),
        )

        rescale_data = data.get('rescale', {}) or {}
        rescale = RescaleSettings(
            resample=rescale_data.get('resample', 'bilinear'),
            max_width=rescale_data.get('max_width'),
            max_height=rescale_data.get('max_height'),
        )
        return cls(image=image, rescale=rescale)

    @classmethod
    def from_yaml(cls, config_path: str) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Config object with loaded parameters

        Example YAML structure:
            image:
              path: images/img_0001.jpg
              width: 1280
              height: 960
              K: [1000, 0, 640, 0, 1000, 480, 0, 0, 1]
              R: [1, 0, 0, 0, 1, 0, 0, 0, 1]
              T: [0, 0, 0]
              last_row: [0, 0, 0, 1]
            rescale:
              resample: bilinear
              max_width: 640
              max_height: 640
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping: {config_path}")

        logger.info(f"Loading configuration from {config_path}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'image': {
                'path': self.image.path,
                'width': self.image.width,
                'height': self.image.height,
                'K': self.image.K,
                'R': self.image.R,
                'T': self.image.T,
                'last_row': self.image.last_row,
            },
            'rescale': {
                'resample': self.rescale.resample,
                'max_width': self.rescale.max_width,
                'max_height': self.rescale.max_height,
            },
        }

    def to_yaml(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")

    def build_image(self) -> ImageGeometry:
        """
        Create the image geometry described by this configuration.

        The last row is applied only if the configuration provides one.
        """
        image = ImageGeometry(
            path=self.image.path,
            width=self.image.width,
            height=self.image.height,
            K=self.image.K,
            R=self.image.R,
            T=self.image.T,
        )
        if self.image.last_row is not None:
            image.set_last_row(self.image.last_row)
        else:
            logger.info(f"No last row configured for {self.image.path}")
        return image

    def make_bitmap(self, data: np.ndarray) -> Bitmap:
        """Wrap a pixel array using the configured resampling filter."""
        return Bitmap(data, resample=self.rescale.resample)
