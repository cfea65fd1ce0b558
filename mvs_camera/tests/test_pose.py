"""
Tests for relative pose computation.
"""

import numpy as np
from numpy.testing import assert_allclose
from scipy.spatial.transform import Rotation

from mvs_camera.pose import compute_relative_pose


class TestRelativePose:

    def test_identity_second_camera(self):
        """With R2 = I, T2 = 0 the result is the inverse of camera 1."""
        R1 = Rotation.from_euler('xyz', [15, -30, 60], degrees=True).as_matrix()
        T1 = np.array([1.0, -2.0, 0.5])

        R, T = compute_relative_pose(R1, T1, np.eye(3), np.zeros(3))

        assert_allclose(R, R1.T, atol=1e-6)
        assert_allclose(T, -R1.T @ T1, atol=1e-5)

    def test_same_camera(self):
        R1 = Rotation.from_euler('z', 45, degrees=True).as_matrix()
        T1 = np.array([0.1, 0.2, 0.3])

        R, T = compute_relative_pose(R1, T1, R1, T1)

        assert_allclose(R, np.eye(3), atol=1e-6)
        assert_allclose(T, np.zeros(3), atol=1e-6)

    def test_single_precision(self):
        R, T = compute_relative_pose(np.eye(3), np.zeros(3), np.eye(3), np.ones(3))

        assert R.dtype == np.float32
        assert T.dtype == np.float32
        assert R.shape == (3, 3)
        assert T.shape == (3,)

    def test_maps_camera_1_frame_to_camera_2(self):
        rotations = Rotation.random(2, random_state=7).as_matrix()
        R1, R2 = rotations
        T1 = np.array([0.5, 0.0, 3.0])
        T2 = np.array([-0.5, 0.2, 2.5])
        X = np.array([0.3, -0.4, 5.0])

        R, T = compute_relative_pose(R1.ravel(), T1, R2.ravel(), T2)

        X1 = R1 @ X + T1
        X2 = R2 @ X + T2
        assert_allclose(R @ X1 + T, X2, atol=1e-4)
