"""
Rotation remapping module.

Derives the camera parameters of an image that has been rotated clockwise
by a multiple of 90 degrees, without modifying the source camera.

Intrinsics (W, H = width, height of the UNROTATED image):
    cnt=1 (90°):   fx'=fy, fy'=fx, cx'=cy,         cy'=W-1-cx
    cnt=2 (180°):  fx'=fx, fy'=fy, cx'=W-1-cx,     cy'=H-1-cy
    cnt=3 (270°):  fx'=fy, fy'=fx, cx'=H-1-cy,     cy'=cx

Pixel mapping (u, v) of the unrotated image to (u', v'):
    cnt=1:  (v, W-1-u)        rotated image is H wide, W high
    cnt=2:  (W-1-u, H-1-v)
    cnt=3:  (H-1-v, u)        rotated image is H wide, W high

Note:
    The formulas reference the unrotated W and H for both axes. They are
    kept exactly as the downstream stereo pipeline expects them; see
    DESIGN.md before changing them.

Extrinsics:
    R' = ROT_90^cnt @ R,  T' = ROT_90^cnt @ T
"""

import numpy as np
from typing import Tuple
import logging

from .camera import CameraModel, CameraSnapshot
from .projection import ArrayLike, as_matrix, as_vector

logger = logging.getLogger(__name__)

# Camera X = old camera Y, camera Y = -old camera X
ROT_90 = np.array([
    [0, 1, 0],
    [-1, 0, 0],
    [0, 0, 1]
], dtype=np.float64)

ROT_180 = ROT_90 @ ROT_90

ROT_270 = ROT_180 @ ROT_90

ROTATION_MATRICES = (np.eye(3), ROT_90, ROT_180, ROT_270)

for _rot in ROTATION_MATRICES:
    _rot.setflags(write=False)


def remap_intrinsics(K: ArrayLike, width: int, height: int, cnt: int) -> np.ndarray:
    """
    Compute the intrinsic matrix of a rotated image.

    Args:
        K: 3x3 intrinsic matrix of the unrotated image
        width: Width of the unrotated image in pixels
        height: Height of the unrotated image in pixels
        cnt: Number of clockwise 90° rotations (reduced modulo 4)

    Returns:
        New 3x3 intrinsic matrix (skew dropped, K[2, 2] = 1 for cnt != 0)
    """
    K = as_matrix(K, 3, 3, "K")
    cnt %= 4
    if cnt == 0:
        return K

    fx, cx = K[0, 0], K[0, 2]
    fy, cy = K[1, 1], K[1, 2]

    K_new = np.zeros((3, 3))
    if cnt == 1:
        K_new[0, 0] = fy
        K_new[0, 2] = cy
        K_new[1, 1] = fx
        K_new[1, 2] = -cx + width - 1
    elif cnt == 2:
        K_new[0, 0] = fx
        K_new[0, 2] = -cx + width - 1
        K_new[1, 1] = fy
        K_new[1, 2] = -cy + height - 1
    else:
        K_new[0, 0] = fy
        K_new[0, 2] = -cy + height - 1
        K_new[1, 1] = fx
        K_new[1, 2] = cx

    # Forced regardless of the source K[2, 2]
    K_new[2, 2] = 1.0
    return K_new


def remap_extrinsics(
    R: ArrayLike, T: ArrayLike, cnt: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Premultiply the extrinsics by the fixed rotation raised to `cnt`.

    Returns:
        Tuple of (R', T')
    """
    rot = ROTATION_MATRICES[cnt % 4]
    return rot @ as_matrix(R, 3, 3, "R"), rot @ as_vector(T, 3, "T")


def rotate_camera(
    camera: CameraModel, width: int, height: int, cnt: int
) -> CameraSnapshot:
    """
    Camera parameters for the image rotated clockwise by cnt * 90°.

    The projection matrix, its inverse and the projection center are
    recomputed from the remapped K, R, T. The source camera is unchanged.

    Args:
        camera: Source camera (last row must be set)
        width: Width of the unrotated image
        height: Height of the unrotated image
        cnt: Number of clockwise 90° rotations; any integer, reduced modulo 4

    Returns:
        CameraSnapshot in single precision
    """
    cnt %= 4
    if cnt == 0:
        return camera.original()

    last_row = camera.last_row
    if last_row is None:
        raise ValueError("Last row must be set before projection queries")

    K_new = remap_intrinsics(camera.K, width, height, cnt)
    R_new, T_new = remap_extrinsics(camera.R, camera.T, cnt)

    logger.debug(f"Rotated camera by {cnt * 90} degrees ({width}x{height})")
    return CameraSnapshot.from_parameters(K_new, R_new, T_new, last_row)
