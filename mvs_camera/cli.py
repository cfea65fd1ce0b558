"""
Command-line interface for inspecting MVS camera geometry.

Usage:
    mvs-camera config.yaml [--rotate N] [--rescale F] [--downsize] [--point X Y Z]
"""

import argparse
import logging
import sys

import numpy as np

from .camera import CameraSnapshot
from .config import Config


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def format_matrix(values: np.ndarray) -> str:
    """Format an array as rows of fixed-width numbers."""
    rows = np.atleast_2d(values)
    return "\n".join(
        "    " + "  ".join(f"{v:14.6g}" for v in row) for row in rows
    )


def print_snapshot(title: str, snapshot: CameraSnapshot) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    for name, values in snapshot.as_dict().items():
        print(f"  {name}:")
        print(format_matrix(np.asarray(values)))


def main(argv=None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Print projection matrices of an MVS camera and its rotated variants',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
    # Original camera
    mvs-camera camera.yaml

    # Camera for the image rotated by 90 degrees clockwise
    mvs-camera camera.yaml --rotate 1

    # Downsize to the configured bounds, then evaluate depth of a point
    mvs-camera camera.yaml --downsize --point 0.5 0.2 4.0
'''
    )

    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML configuration file'
    )

    parser.add_argument(
        '--rotate', '-r',
        type=int,
        default=0,
        help='Number of clockwise 90 degree rotations (default: 0)'
    )

    parser.add_argument(
        '--rescale',
        type=float,
        default=None,
        help='Uniform rescale factor applied before printing'
    )

    parser.add_argument(
        '--downsize',
        action='store_true',
        help='Downsize to max_width/max_height from the configuration'
    )

    parser.add_argument(
        '--point',
        type=float,
        nargs=3,
        metavar=('X', 'Y', 'Z'),
        default=None,
        help='World point whose depth is printed'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = Config.from_yaml(args.config)
        image = config.build_image()

        if args.rescale is not None:
            image.rescale(args.rescale)

        if args.downsize:
            if config.rescale.max_width is None or config.rescale.max_height is None:
                raise ValueError("--downsize requires rescale.max_width and rescale.max_height")
            image.downsize(config.rescale.max_width, config.rescale.max_height)

        print(f"\nImage: {image.path}")
        print(f"Width, height: {image.width}, {image.height}")
        print(f"Last row: {image.camera.last_row}")

        print_snapshot("ORIGINAL", image.original())
        if args.rotate % 4 != 0:
            print_snapshot(
                f"ROTATED {(args.rotate % 4) * 90} DEGREES",
                image.rotate_90_multi(args.rotate),
            )

        if args.point is not None:
            depth = image.get_depth(*args.point)
            print(f"\nDepth of point {tuple(args.point)}: {depth:.6g}")
            if not np.isfinite(depth):
                logger.warning("Depth is not finite (point projects to infinity)")

        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except (KeyError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
