"""
Tests for configuration loading and the command-line interface.
"""

import pytest
import numpy as np
import yaml
from numpy.testing import assert_allclose

from mvs_camera.cli import main
from mvs_camera.config import Config, ImageConfig, RescaleSettings


CONFIG_DATA = {
    'image': {
        'path': 'images/img_0001.jpg',
        'width': 1280,
        'height': 960,
        'K': [1000, 0, 640, 0, 1000, 480, 0, 0, 1],
        'R': [1, 0, 0, 0, 1, 0, 0, 0, 1],
        'T': [0, 0, 1],
        'last_row': [0, 0, 0, 1],
    },
    'rescale': {
        'resample': 'bicubic',
        'max_width': 640,
        'max_height': 640,
    },
}


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "camera.yaml"
    with open(path, 'w') as f:
        yaml.safe_dump(CONFIG_DATA, f)
    return path


class TestConfig:
    """Tests for YAML configuration."""

    def test_from_yaml(self, config_file):
        config = Config.from_yaml(str(config_file))

        assert config.image.width == 1280
        assert config.image.K[2] == 640
        assert config.image.last_row == [0, 0, 0, 1]
        assert config.rescale.resample == 'bicubic'
        assert config.rescale.max_width == 640

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(str(tmp_path / "missing.yaml"))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            Config.from_yaml(str(path))

    def test_missing_intrinsics(self):
        with pytest.raises(KeyError):
            Config.from_dict({'image': {'width': 10, 'height': 10}})

    def test_defaults(self):
        config = Config.from_dict({'image': {'width': 10, 'height': 8, 'K': np.eye(3).tolist()}})

        assert config.image.R == np.eye(3).ravel().tolist()
        assert config.image.T == [0.0, 0.0, 0.0]
        assert config.image.last_row is None
        assert config.rescale.resample == 'bilinear'

    def test_nested_matrices_flattened(self):
        image = ImageConfig(
            path='a.png', width=4, height=4,
            K=[[2, 0, 1], [0, 2, 1], [0, 0, 1]], R=np.eye(3), T=[0, 0, 0],
        )
        assert image.K == [2, 0, 1, 0, 2, 1, 0, 0, 1]

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            ImageConfig(path='a.png', width=0, height=4, K=np.eye(3), R=np.eye(3), T=[0, 0, 0])
        with pytest.raises(ValueError):
            ImageConfig(path='a.png', width=4, height=4, K=[1, 2], R=np.eye(3), T=[0, 0, 0])
        with pytest.raises(ValueError):
            RescaleSettings(resample='area')

    def test_round_trip(self, config_file, tmp_path):
        config = Config.from_yaml(str(config_file))
        out_path = tmp_path / "saved.yaml"
        config.to_yaml(str(out_path))

        loaded = Config.from_yaml(str(out_path))
        assert loaded.to_dict() == config.to_dict()

    def test_build_image(self, config_file):
        image = Config.from_yaml(str(config_file)).build_image()

        assert image.path == 'images/img_0001.jpg'
        assert (image.width, image.height) == (1280, 960)
        assert_allclose(image.get_C(), [0.0, 0.0, -1.0])
        assert image.camera.has_last_row

    def test_build_image_without_last_row(self):
        data = {'image': dict(CONFIG_DATA['image'], last_row=None)}
        image = Config.from_dict(data).build_image()

        assert not image.camera.has_last_row
        with pytest.raises(ValueError):
            image.get_P_inv_P()

    def test_make_bitmap(self, config_file):
        config = Config.from_yaml(str(config_file))
        bitmap = config.make_bitmap(np.zeros((960, 1280), dtype=np.uint8))

        assert bitmap.resample == 'bicubic'
        image = config.build_image()
        image.set_bitmap(bitmap)
        image.downsize(config.rescale.max_width, config.rescale.max_height)
        assert image.bitmap.data.shape == (480, 640)
        assert image.bitmap.resample == 'bicubic'


class TestCli:
    """Tests for the command-line entry point."""

    def test_original(self, config_file, capsys):
        assert main([str(config_file)]) == 0

        out = capsys.readouterr().out
        assert "ORIGINAL" in out
        assert "Width, height: 1280, 960" in out
        for name in ("K:", "R:", "T:", "P:", "inv_P:", "C:"):
            assert name in out
        assert "ROTATED" not in out

    def test_rotate(self, config_file, capsys):
        assert main([str(config_file), '--rotate', '1']) == 0
        assert "ROTATED 90 DEGREES" in capsys.readouterr().out

    def test_downsize_and_point(self, config_file, capsys):
        assert main([str(config_file), '--downsize', '--point', '0', '0', '3']) == 0

        out = capsys.readouterr().out
        assert "Width, height: 640, 480" in out
        assert "Depth of point" in out

    def test_rescale(self, config_file, capsys):
        assert main([str(config_file), '--rescale', '0.25']) == 0
        assert "Width, height: 320, 240" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.yaml")]) == 1

    def test_missing_last_row(self, tmp_path):
        path = tmp_path / "no_last_row.yaml"
        data = {'image': dict(CONFIG_DATA['image'], last_row=None)}
        with open(path, 'w') as f:
            yaml.safe_dump(data, f)

        assert main([str(path)]) == 1

    def test_downsize_without_bounds(self, tmp_path):
        path = tmp_path / "no_bounds.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump({'image': CONFIG_DATA['image']}, f)

        assert main([str(path), '--downsize']) == 1
