"""
MVS Camera Geometry Package

Camera geometry for multi-view stereo: pinhole intrinsics and extrinsics,
normalized homogeneous projection matrices and their inverses, per-point
depth, and camera parameters for images rotated by multiples of 90°.

Conventions:
    - Matrices are row-major; flat inputs are reshaped in row-major order
    - Extrinsics map world to camera: X_cam = R @ X_world + T
    - P = [K @ [R | T]; last_row], scaled so that max(|P|) = 10
    - Single precision (float32) outputs, double precision internally
"""

from .projection import (
    STABILITY_SCALE,
    ProjectionMatrices,
    compute_projection_matrix,
    compute_4x4_projection_matrix,
    compute_projection_center,
    normalize_max_abs,
    to_low_precision,
)
from .camera import CameraModel, CameraSnapshot
from .rotation import (
    ROT_90,
    ROT_180,
    ROT_270,
    ROTATION_MATRICES,
    remap_intrinsics,
    remap_extrinsics,
    rotate_camera,
)
from .bitmap import Bitmap
from .image import ImageGeometry, DimensionMismatchError
from .pose import compute_relative_pose
from .config import Config, ImageConfig, RescaleSettings

__version__ = "0.1.0"
__all__ = [
    "STABILITY_SCALE",
    "ProjectionMatrices",
    "compute_projection_matrix",
    "compute_4x4_projection_matrix",
    "compute_projection_center",
    "normalize_max_abs",
    "to_low_precision",
    "CameraModel",
    "CameraSnapshot",
    "ROT_90",
    "ROT_180",
    "ROT_270",
    "ROTATION_MATRICES",
    "remap_intrinsics",
    "remap_extrinsics",
    "rotate_camera",
    "Bitmap",
    "ImageGeometry",
    "DimensionMismatchError",
    "compute_relative_pose",
    "Config",
    "ImageConfig",
    "RescaleSettings",
]
