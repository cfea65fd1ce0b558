"""
Camera model module for multi-view stereo.

Holds the intrinsic matrix K, the world-to-camera extrinsics (R, T) and the
auxiliary fourth row used to build the homogeneous 4x4 projection matrix.

Precision:
    Parameters are stored in double precision. Accessors without a
    `_double` suffix return single precision (float32) copies, which is
    what the GPU stereo kernels consume.

Mutability:
    CameraModel is explicitly mutable through `set_K`, `set_last_row` and
    `scale_intrinsics`. All other methods are read-only derivations.
    CameraSnapshot is the immutable, low precision result of a query.
"""

import numpy as np
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass
import logging

from .projection import (
    ArrayLike,
    ProjectionMatrices,
    as_matrix,
    as_vector,
    compute_4x4_projection_matrix,
    compute_projection_center,
    compute_projection_matrix,
    stack_last_row,
    to_low_precision,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraSnapshot:
    """
    Single precision camera parameters with derived projection matrices.

    Attributes:
        K: 3x3 intrinsic matrix
        R: 3x3 rotation matrix
        T: Translation 3-vector
        P: Normalized 4x4 projection matrix
        inv_P: Normalized 4x4 inverse projection matrix
        C: Projection center 3-vector
    """
    K: np.ndarray
    R: np.ndarray
    T: np.ndarray
    P: np.ndarray
    inv_P: np.ndarray
    C: np.ndarray

    @classmethod
    def from_parameters(
        cls,
        K: np.ndarray,
        R: np.ndarray,
        T: np.ndarray,
        last_row: np.ndarray,
    ) -> "CameraSnapshot":
        """Derive P, inv_P and C in double precision and reduce everything to float32."""
        matrices = compute_4x4_projection_matrix(K, R, T, last_row)
        C = compute_projection_center(R, T)
        P, inv_P = matrices.to_low_precision()
        values = {
            'K': to_low_precision(K),
            'R': to_low_precision(R),
            'T': to_low_precision(T),
            'P': P,
            'inv_P': inv_P,
            'C': to_low_precision(C),
        }
        for arr in values.values():
            arr.setflags(write=False)
        return cls(**values)

    def as_dict(self) -> Dict[str, Any]:
        """Return the parameters as nested lists (row-major)."""
        return {
            'K': self.K.tolist(),
            'R': self.R.tolist(),
            'T': self.T.tolist(),
            'P': self.P.tolist(),
            'inv_P': self.inv_P.tolist(),
            'C': self.C.tolist(),
        }


class CameraModel:
    """
    Pinhole camera with a configurable homogeneous fourth row.

    The last row must be set with `set_last_row` before any projection,
    inverse or depth query; there is no default.
    """

    def __init__(self, K: ArrayLike, R: ArrayLike, T: ArrayLike):
        """
        Initialize camera model.

        Args:
            K: 3x3 intrinsic matrix (or 9 values, row-major)
            R: 3x3 rotation matrix (or 9 values, row-major)
            T: Translation 3-vector
        """
        self._K = as_matrix(K, 3, 3, "K")
        self._R = as_matrix(R, 3, 3, "R")
        self._T = as_vector(T, 3, "T")
        self._last_row: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        return (
            f"CameraModel(fx={self._K[0, 0]:.3f}, fy={self._K[1, 1]:.3f}, "
            f"cx={self._K[0, 2]:.3f}, cy={self._K[1, 2]:.3f})"
        )

    @property
    def K(self) -> np.ndarray:
        return self._K.copy()

    @property
    def R(self) -> np.ndarray:
        return self._R.copy()

    @property
    def T(self) -> np.ndarray:
        return self._T.copy()

    @property
    def last_row(self) -> Optional[np.ndarray]:
        return None if self._last_row is None else self._last_row.copy()

    @property
    def has_last_row(self) -> bool:
        return self._last_row is not None

    # Mutators

    def set_K(self, K: ArrayLike) -> None:
        """Replace the intrinsic matrix."""
        self._K = as_matrix(K, 3, 3, "K")

    def set_last_row(self, last_row: ArrayLike) -> None:
        """Set the fourth row of the homogeneous projection matrix."""
        self._last_row = as_vector(last_row, 4, "last_row")
        logger.debug(f"Last row set to {self._last_row}")

    def scale_intrinsics(self, scale_x: float, scale_y: float) -> None:
        """
        Scale focal lengths and principal point for a resized image.

        Args:
            scale_x: Horizontal scale applied to fx and cx
            scale_y: Vertical scale applied to fy and cy
        """
        self._K[0, 0] *= scale_x
        self._K[0, 2] *= scale_x
        self._K[1, 1] *= scale_y
        self._K[1, 2] *= scale_y

    # Queries

    def _require_last_row(self) -> np.ndarray:
        if self._last_row is None:
            raise ValueError("Last row must be set before projection queries")
        return self._last_row

    def get_K(self) -> np.ndarray:
        """Intrinsic matrix in single precision."""
        return to_low_precision(self._K)

    def get_K_double(self) -> np.ndarray:
        return self._K.copy()

    def get_RT(self) -> Tuple[np.ndarray, np.ndarray]:
        """Rotation and translation in single precision."""
        return to_low_precision(self._R), to_low_precision(self._T)

    def get_C(self) -> np.ndarray:
        """Projection center in single precision."""
        return to_low_precision(self.get_C_double())

    def get_C_double(self) -> np.ndarray:
        return compute_projection_center(self._R, self._T)

    def get_P_inv_P(self) -> Tuple[np.ndarray, np.ndarray]:
        """Normalized projection matrix and inverse in single precision."""
        return self.get_P_inv_P_double().to_low_precision()

    def get_P_inv_P_double(self) -> ProjectionMatrices:
        return compute_4x4_projection_matrix(
            self._K, self._R, self._T, self._require_last_row()
        )

    def project_homogeneous(self, x: float, y: float, z: float) -> np.ndarray:
        """
        Apply the unnormalized 4x4 projection matrix to a world point.

        Args:
            x, y, z: World coordinates

        Returns:
            Homogeneous 4-vector (double precision)
        """
        P = stack_last_row(
            compute_projection_matrix(self._K, self._R, self._T),
            self._require_last_row(),
        )
        return P @ np.array([x, y, z, 1.0])

    def get_depth(self, x: float, y: float, z: float) -> np.float32:
        """
        Compute the depth of a world point.

        The depth is the third component of the projected homogeneous point
        divided by the fourth. It is computed from the unnormalized matrix.
        A fourth component of zero yields inf or NaN, which is returned
        unchanged for the caller to check.

        Returns:
            Depth in single precision
        """
        result = self.project_homogeneous(x, y, z)
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            depth = result[2] / result[3]
            return np.float32(depth)

    def original(self) -> CameraSnapshot:
        """Stored parameters and derived matrices in single precision."""
        return CameraSnapshot.from_parameters(
            self._K, self._R, self._T, self._require_last_row()
        )
