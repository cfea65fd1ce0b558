"""
Projection matrix module for multi-view stereo cameras.

Builds the homogeneous 4x4 projection matrix of a pinhole camera and its
inverse, and computes the camera projection center.

Matrix Layout:
    - All matrices are row-major; flat inputs of length 9/3/4 are reshaped
      to 3x3, (3,), (4,) in row-major order.
    - P = [ K @ [R | T] ]
          [   last_row  ]

Numerical Stability:
    P is scaled so that its largest absolute coefficient equals
    STABILITY_SCALE (10.0) before inversion. The inverse is then scaled
    again by its own, independent factor. Consequently P @ inv_P is a
    multiple of the identity, NOT the identity itself. Both factors are
    returned so that callers can undo the normalization if needed.
"""

import numpy as np
from typing import Sequence, Union
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]

# Target magnitude of the largest coefficient after normalization
STABILITY_SCALE = 10.0


@dataclass
class ProjectionMatrices:
    """
    Normalized projection matrix and inverse (double precision).

    Attributes:
        P: 4x4 projection matrix scaled by `scale`
        inv_P: 4x4 inverse of the scaled P, scaled by `inv_scale`
        scale: Factor applied to the raw P
        inv_scale: Factor applied to the raw inverse of the scaled P
    """
    P: np.ndarray
    inv_P: np.ndarray
    scale: float
    inv_scale: float

    def to_low_precision(self):
        """Return (P, inv_P) as float32 arrays."""
        return to_low_precision(self.P), to_low_precision(self.inv_P)


def as_matrix(values: ArrayLike, rows: int, cols: int, name: str = "matrix") -> np.ndarray:
    """
    Convert a flat row-major sequence or nested sequence to a float64 matrix.

    Raises:
        ValueError: If the number of elements does not match rows * cols
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.size != rows * cols:
        raise ValueError(
            f"{name} must have {rows * cols} elements, got shape {arr.shape}"
        )
    return arr.reshape(rows, cols).copy()


def as_vector(values: ArrayLike, size: int, name: str = "vector") -> np.ndarray:
    """Convert a sequence to a float64 vector of the given size."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size != size:
        raise ValueError(f"{name} must have {size} elements, got shape {arr.shape}")
    return arr.reshape(size).copy()


def to_low_precision(values: np.ndarray) -> np.ndarray:
    """Reduce an array to single precision (float32)."""
    return np.asarray(values).astype(np.float32)


def compute_projection_matrix(
    K: ArrayLike, R: ArrayLike, T: ArrayLike
) -> np.ndarray:
    """
    Compute the 3x4 projection matrix K @ [R | T].

    Args:
        K: 3x3 intrinsic matrix
        R: 3x3 rotation matrix
        T: Translation 3-vector

    Returns:
        3x4 projection matrix
    """
    K = as_matrix(K, 3, 3, "K")
    Rt = np.zeros((3, 4))
    Rt[:, :3] = as_matrix(R, 3, 3, "R")
    Rt[:, 3] = as_vector(T, 3, "T")
    return K @ Rt


def stack_last_row(P_3by4: np.ndarray, last_row: ArrayLike) -> np.ndarray:
    """Append `last_row` below a 3x4 matrix to form a 4x4 matrix."""
    P_4by4 = np.zeros((4, 4))
    P_4by4[:3, :] = P_3by4
    P_4by4[3, :] = as_vector(last_row, 4, "last_row")
    return P_4by4


def normalize_max_abs(M: np.ndarray, target: float = STABILITY_SCALE):
    """
    Scale a matrix so that its largest absolute coefficient equals `target`.

    A zero matrix produces a non-finite factor (and NaN coefficients); this
    is left to the caller to detect.

    Returns:
        Tuple of (scaled matrix, scale factor)
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        scale = np.float64(target) / np.abs(M).max()
        return M * scale, float(scale)


def invert_matrix(M: np.ndarray) -> np.ndarray:
    """
    Invert a square matrix, returning a NaN matrix if it is singular.
    """
    try:
        return np.linalg.inv(M)
    except np.linalg.LinAlgError:
        logger.warning("Projection matrix is singular, inverse is undefined")
        return np.full_like(M, np.nan)


def compute_4x4_projection_matrix(
    K: ArrayLike,
    R: ArrayLike,
    T: ArrayLike,
    last_row: ArrayLike,
    target: float = STABILITY_SCALE,
) -> ProjectionMatrices:
    """
    Compute the normalized 4x4 projection matrix and its inverse.

    Steps:
        1. P_3by4 = K @ [R | T]
        2. P = P_3by4 stacked with `last_row`
        3. P *= target / max(|P|)
        4. inv_P = inverse(P), then inv_P *= target / max(|inv_P|)

    Args:
        K: 3x3 intrinsic matrix
        R: 3x3 rotation matrix
        T: Translation 3-vector
        last_row: Fourth row of the homogeneous matrix
        target: Magnitude of the largest coefficient after scaling

    Returns:
        ProjectionMatrices with both matrices and their scale factors
    """
    P = stack_last_row(compute_projection_matrix(K, R, T), last_row)
    P, scale = normalize_max_abs(P, target)

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        inv_P = invert_matrix(P)
    inv_P, inv_scale = normalize_max_abs(inv_P, target)

    logger.debug(f"Projection matrix scale: {scale:.6g}, inverse scale: {inv_scale:.6g}")
    return ProjectionMatrices(P=P, inv_P=inv_P, scale=scale, inv_scale=inv_scale)


def compute_projection_center(R: ArrayLike, T: ArrayLike) -> np.ndarray:
    """
    Compute the camera projection center in world coordinates.

    C = -R^T @ T

    Args:
        R: 3x3 rotation matrix (world to camera)
        T: Translation 3-vector (world to camera)

    Returns:
        Projection center as a 3-vector
    """
    return -as_matrix(R, 3, 3, "R").T @ as_vector(T, 3, "T")
