"""
imagetoolbar package.

Adds a toolbar of image-manipulation tools to a Qt window showing matplotlib
images: zoom and pan, distance and point measurement, pixel inspection,
cropping, rotation and launchers for companion image applications.

Subpackages
-----------
- ui
    FigureWindow, the toolbar itself, its action handlers, icons and pop-up
    windows.

- interface
    The thin interaction layer: array-level tool functions, the canvas
    ToolDispatcher and the companion lookup.

- models
    ToolbarContext and the handle records returned to callers.

- apps
    Built-in companion applications (segmenter, colour thresholder, region
    analyzer, expanded axes view).

Other modules
-------------
- config
    Single in-memory configuration dictionary (con_dict).

- main
    Command-line entry point.

Typical usage
-------------
    from imagetoolbar import FigureWindow, image_toolbar

    win = FigureWindow()
    win.imshow(img)
    image_toolbar(win)
"""

from .ui import FigureWindow, InvalidHandleError, current_window, image_toolbar

__all__ = ["FigureWindow", "InvalidHandleError", "current_window", "image_toolbar"]
