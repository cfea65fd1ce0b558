"""
Relative pose between two cameras.
"""

import numpy as np
from typing import Tuple

from .projection import ArrayLike


def compute_relative_pose(
    R1: ArrayLike, T1: ArrayLike, R2: ArrayLike, T2: ArrayLike
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the transform from the frame of camera 1 to the frame of camera 2.

        R = R2 @ R1^T
        T = T2 - R @ T1

    Computed in single precision; only accurate enough to seed homography
    estimation between the two views.

    Args:
        R1, T1: World-to-camera rotation and translation of camera 1
        R2, T2: World-to-camera rotation and translation of camera 2

    Returns:
        Tuple of (R, T) as float32 arrays of shape (3, 3) and (3,)
    """
    R1 = np.asarray(R1, dtype=np.float32).reshape(3, 3)
    R2 = np.asarray(R2, dtype=np.float32).reshape(3, 3)
    T1 = np.asarray(T1, dtype=np.float32).reshape(3)
    T2 = np.asarray(T2, dtype=np.float32).reshape(3)

    R = R2 @ R1.T
    T = T2 - R @ T1
    return R, T
