"""
Figure windows that the image toolbar attaches to.

A FigureWindow is a Qt main window hosting one matplotlib Figure, optionally
with the standard navigation toolbar. Open windows are kept in a module-level
registry so that "the current window" can be found (and created on demand),
and so that any handle belonging to a window can be traced back to it.
"""
import logging
import weakref

import numpy as np
from matplotlib.artist import Artist
from matplotlib.backend_bases import FigureCanvasBase
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas, NavigationToolbar2QT as NavigationTool
from matplotlib.figure import Figure

from PyQt5.QtCore import QEvent, pyqtSignal
from PyQt5.QtWidgets import QLabel, QMainWindow, QVBoxLayout, QWidget

from ..interface import tools as t

logger = logging.getLogger(__name__)

_windows = []   # open windows, most recently active last


class InvalidHandleError(ValueError):
    """Raised when a handle does not belong to any open FigureWindow."""


class FigureWindow(QMainWindow):
    """
    Main window holding a single matplotlib Figure.

    Emits ``current_axes_changed(axes)`` whenever its current axes changes,
    either because the user clicked into another axes or through
    set_current_axes(). Emits ``closing`` when the window is closed.
    """
    current_axes_changed = pyqtSignal(object)
    closing = pyqtSignal()

    def __init__(self, parent=None, toolbar=True, title="Figure"):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.resize(900, 700)

        self.fig = Figure(figsize=(8, 6))
        self.canvas = FigureCanvas(self.fig)
        self._sources = weakref.WeakKeyDictionary()   # AxesImage -> array shown

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.canvas)
        self.setCentralWidget(central)

        self.nav_toolbar = None
        if toolbar:
            self.nav_toolbar = NavigationTool(self.canvas, self)
            self.addToolBar(self.nav_toolbar)

        self.pixel_info = QLabel("", self)
        self.statusBar().addPermanentWidget(self.pixel_info)

        self.canvas.mpl_connect("button_press_event", self._on_press)
        register(self)

    @property
    def has_figure_toolbar(self) -> bool:
        return self.nav_toolbar is not None

    # -------- current axes -------------------------------------------------
    def gca(self):
        """Current axes, or None for an empty figure (never creates one)."""
        return self.fig.gca() if self.fig.axes else None

    def set_current_axes(self, ax):
        if ax is None or ax is self.gca():
            return
        self.fig.sca(ax)
        self.current_axes_changed.emit(ax)

    def _on_press(self, event):
        if event.inaxes is not None:
            self.set_current_axes(event.inaxes)

    # -------- display ------------------------------------------------------
    def subplot(self, *args):
        ax = self.fig.add_subplot(*args)
        self.set_current_axes(ax)
        return ax

    def imshow(self, image, ax=None, title=None):
        """
        Show ``image`` in ``ax`` (default: the current axes), replacing what
        was there. Always creates a new AxesImage.
        """
        image = np.asarray(image)
        if ax is None:
            ax = self.gca()
        if ax is None:
            ax = self.subplot(111)
        ax.clear()
        if image.ndim == 2:
            vmin, vmax = t.display_range(image)
            data = image.astype(np.uint8) if image.dtype == bool else image
            im = ax.imshow(data, cmap="gray", vmin=vmin, vmax=vmax,
                           origin="upper", interpolation="nearest")
        else:
            im = ax.imshow(image, origin="upper", interpolation="nearest")
        self._sources[im] = image
        if title is not None:
            ax.set_title(title)
        ax.set_xticks([])
        ax.set_yticks([])
        self.set_current_axes(ax)
        self.canvas.draw_idle()
        return im

    def image_data(self, im):
        """The array an AxesImage was created from."""
        data = self._sources.get(im)
        if data is None:
            data = np.ma.getdata(im.get_array())
        return data

    # -------- registry hooks -----------------------------------------------
    def changeEvent(self, event):
        if event.type() == QEvent.ActivationChange and self.isActiveWindow():
            set_current(self)
        super().changeEvent(event)

    def closeEvent(self, ev):
        unregister(self)
        self.closing.emit()
        super().closeEvent(ev)


#========== window registry ===================================================

def register(window):
    if window not in _windows:
        _windows.append(window)


def unregister(window):
    try:
        _windows.remove(window)
    except ValueError:
        pass


def set_current(window):
    unregister(window)
    _windows.append(window)


def current_window(create=True):
    """The most recently active FigureWindow, created if none is open."""
    if _windows:
        return _windows[-1]
    if not create:
        return None
    logger.debug("No figure window open, creating one")
    return FigureWindow()


def resolve_window(handle):
    """
    Trace any handle in a window back to its FigureWindow.

    Accepts the window itself, any widget inside it, its canvas, its Figure,
    or any matplotlib artist (Axes, AxesImage, ...) drawn in it.
    """
    if isinstance(handle, FigureWindow):
        if handle in _windows:
            return handle
    elif isinstance(handle, QWidget):
        win = handle.window()
        if isinstance(win, FigureWindow) and win in _windows:
            return win
    else:
        if isinstance(handle, FigureCanvasBase):
            handle = handle.figure
        while isinstance(handle, Artist) and not isinstance(handle, Figure):
            parent = getattr(handle, "figure", None)
            if parent is handle:
                break
            handle = parent
        if isinstance(handle, Figure):
            for win in _windows:
                if win.fig is handle:
                    return win
    raise InvalidHandleError(
        "image_toolbar: Please provide the handle to a figure or image-containing axes.")
