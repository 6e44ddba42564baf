"""
Command-line entry point: show images in a window with the toolbar attached.
"""
import argparse
import logging
import math
import sys
from pathlib import Path

from PyQt5.QtWidgets import QApplication
from skimage import data

from . import config
from .interface import tools as t
from .ui import FigureWindow, image_toolbar

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="imagetoolbar",
        description="Display images with a toolbar of image-manipulation tools.",
    )
    parser.add_argument("paths", nargs="*", type=Path,
                        help="Image files to open, one axes each. A demo is shown if omitted.")
    parser.add_argument(
        "--no-figure-toolbar",
        action="store_true",
        help="Hide the standard navigation toolbar; zoom and pan then come from the image toolbar.",
    )
    parser.add_argument(
        "--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
        help="Override a configuration value, e.g. --set zoom_factor=1.5. May be repeated.",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def apply_overrides(overrides):
    """Apply KEY=VALUE strings to the configuration dictionary."""
    for item in overrides:
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        config.set_value(key.strip(), value.strip())


def build_window(paths, figure_toolbar=True) -> FigureWindow:
    """Lay the images out side by side (at most three per row)."""
    if paths:
        images = [(t.load_image(p), Path(p).name) for p in paths]
    else:
        images = [(data.astronaut(), "astronaut.png"), (data.camera(), "cameraman.tif")]

    win = FigureWindow(toolbar=figure_toolbar, title="imagetoolbar")
    cols = min(3, len(images))
    rows = math.ceil(len(images) / cols)
    for i, (img, title) in enumerate(images, start=1):
        ax = win.subplot(rows, cols, i)
        win.imshow(img, ax=ax, title=title)
    win.fig.tight_layout()
    return win


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)
    try:
        apply_overrides(args.overrides)
    except (KeyError, ValueError):
        logger.error("Invalid --set option", exc_info=True)
        sys.exit(2)
    logger.debug(f"Configuration: {config.get_all()}")

    app = QApplication(sys.argv[:1])
    try:
        win = build_window(args.paths, figure_toolbar=not args.no_figure_toolbar)
    except (OSError, ValueError):
        logger.error("Could not open the requested images", exc_info=True)
        sys.exit(1)
    image_toolbar(win)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
