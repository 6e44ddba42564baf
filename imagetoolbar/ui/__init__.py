"""
UI module for imagetoolbar.

This package contains the Qt-based components of the toolbar:

- FigureWindow:
    A QMainWindow hosting one matplotlib Figure, with an optional standard
    navigation toolbar, a pixel-value readout in the status bar and a
    ``current_axes_changed`` signal. Open windows are tracked so that
    ``current_window()`` and ``resolve_window()`` can find them.

- image_toolbar / ImageToolbar:
    Attach the image toolbar to a window and build its controls from the
    action handlers (ImageActions, AppActions).

- Utility windows:
    InfoTable, PixelRegionWindow and the busy_cursor helper.
"""

from .figure_window import (
    FigureWindow,
    InvalidHandleError,
    current_window,
    resolve_window,
)
from .image_toolbar import TOOLBAR_TAG, ImageToolbar, image_toolbar
from .util_windows import InfoTable, PixelRegionWindow, busy_cursor

__all__ = [
    "FigureWindow",
    "InvalidHandleError",
    "current_window",
    "resolve_window",
    "TOOLBAR_TAG",
    "ImageToolbar",
    "image_toolbar",
    "InfoTable",
    "PixelRegionWindow",
    "busy_cursor",
]
