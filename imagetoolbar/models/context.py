"""
Tracks the working state shared by every toolbar handler.

Holds the target window, the images and image axes currently shown in it,
the zoom mode and the companion windows opened from the toolbar.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np


@dataclass
class ZoomState:
    enabled: bool = False
    direction: str = "in"


@dataclass
class ToolbarHandles:
    """
    Handles of every control added to a window, by kind, in creation order.

    Attributes
    ----------
    toolbar : QToolBar
        The container tagged ``AutogeneratedImageToolbar``.
    push_tools : list[QAction]
        Stateless buttons.
    toggle_tools : list[QAction]
        Checkable buttons.
    """
    toolbar: Any = None
    push_tools: list = field(default_factory=list)
    toggle_tools: list = field(default_factory=list)


@dataclass
class ToolbarContext:
    """
    Lightweight container for one toolbar's working state.

    ``images`` and ``axes`` are caches derived from the window's figure.
    They go stale whenever an image is loaded, cropped or rotated and must
    be rebuilt with collect() afterwards.

    Attributes
    ----------
    window : FigureWindow
        The window the toolbar is attached to (referenced, not owned).
    images : list[AxesImage]
        Every image shown in the window.
    axes : list[Axes]
        The axes holding those images, without duplicates.
    zoom : ZoomState
        Zoom mode driven by the zoom toggles.
    active_tool : str | None
        Name of the tool currently owning single clicks.
    windows : list
        Companion windows opened from the toolbar.
    """

    window: Any
    images: list = field(default_factory=list)
    axes: list = field(default_factory=list)
    zoom: ZoomState = field(default_factory=ZoomState)
    active_tool: Optional[str] = None
    windows: list = field(default_factory=list)

    @property
    def figure(self):
        return self.window.fig

    def collect(self):
        """Rebuild the image and axes caches from the figure."""
        self.images = [im for ax in self.figure.axes for im in ax.get_images()]
        axes = []
        for im in self.images:
            if im.axes not in axes:
                axes.append(im.axes)
        self.axes = axes
        return self.images, self.axes

    # ------------------------------------------------------------------
    # convenience properties
    # ------------------------------------------------------------------

    @property
    def has_images(self) -> bool:
        return bool(self.images)

    def current_axes(self):
        """
        The current image axes of the window.

        The figure's current axes when it holds an image, otherwise the
        most recently added image axes. Never creates an axes.
        """
        if not self.figure.axes:
            return None
        cur = self.figure.gca()
        if cur in self.axes:
            return cur
        return self.axes[-1] if self.axes else None

    def images_in(self, ax):
        return list(ax.get_images()) if ax is not None else []

    def current_image(self):
        imgs = self.images_in(self.current_axes())
        return imgs[-1] if imgs else None

    def current_array(self) -> np.ndarray | None:
        im = self.current_image()
        if im is None:
            return None
        return self.window.image_data(im)

    def keep(self, widget):
        """Hold a reference to a companion window until it is destroyed."""
        self.windows.append(widget)
        destroyed = getattr(widget, "destroyed", None)
        if destroyed is not None:
            destroyed.connect(lambda _obj=None, w=widget: self._forget(w))
        return widget

    def _forget(self, widget):
        try:
            self.windows.remove(widget)
        except ValueError:
            pass
