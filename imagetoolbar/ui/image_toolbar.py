"""
The image toolbar and the function that attaches it to a figure window.

``image_toolbar()`` finds (or creates) the window, refuses to add a second
toolbar, makes sure there is an image to work on, builds the controls from
the action handlers and keeps the current-axes highlight in sync.
"""
import logging

from PyQt5.QtCore import QEvent, QObject, QSize, Qt
from PyQt5.QtWidgets import QAction, QApplication, QToolBar

from ..config import con_dict
from ..interface import ToolDispatcher
from ..models import ToolbarContext, ToolbarHandles
from .app_actions import AppActions
from .figure_window import current_window, resolve_window
from .image_actions import ImageActions

logger = logging.getLogger(__name__)

TOOLBAR_TAG = "AutogeneratedImageToolbar"


class _TooltipFilter(QObject):
    """Swallows tooltip events while tooltips are switched off."""
    def __init__(self, parent=None):
        super().__init__(parent)
        self.enabled = True

    def eventFilter(self, obj, event):
        if event.type() == QEvent.ToolTip and not self.enabled:
            return True
        return super().eventFilter(obj, event)


class ImageToolbar:
    """
    Toolbar of image tools bound to one FigureWindow.

    Owns the QToolBar, the canvas event dispatcher and the shared
    ToolbarContext handed to both action handlers. Lives as long as the
    window (stored on it as ``window.image_toolbar``).
    """
    def __init__(self, window):
        self.window = window
        self.cxt = ToolbarContext(window)
        self.handles = ToolbarHandles()
        self.dispatcher = ToolDispatcher(window.canvas)

        self.bar = self._create_bar()
        self.handles.toolbar = self.bar
        self._tooltips = _TooltipFilter(self.bar)

        self.image_actions = ImageActions(self.cxt, self, parent=window)
        self.app_actions = AppActions(self.cxt, self, parent=window)

        window.addToolBarBreak()
        window.addToolBar(Qt.TopToolBarArea, self.bar)

        self.image_actions.refresh_axes_images()
        if self.cxt.images:
            self.image_actions.install_pixel_info()
        self.image_actions.current_axes_changed()
        window.current_axes_changed.connect(self.image_actions.current_axes_changed)
        window.closing.connect(self.teardown)
        window.image_toolbar = self

    def _create_bar(self):
        bar = QToolBar("Image Toolbar", self.window)
        bar.setObjectName(TOOLBAR_TAG)
        bar.setMovable(False)
        bar.setFloatable(False)
        bar.setToolButtonStyle(Qt.ToolButtonIconOnly)
        size = con_dict["icon_size"]
        bar.setIconSize(QSize(size, size))
        return bar

    def add_group(self, name, entries):
        """
        Append a group of controls, separated from the previous group.

        Each entry is ("push"|"toggle", tag, icon, callback, tooltip).
        """
        if self.bar.actions():
            self.bar.addSeparator()
        for entry in entries:
            if not entry:
                continue
            kind, tag, icon, callback, tooltip = entry

            act = QAction(icon, tooltip, self.bar)
            act.setObjectName(tag)
            act.setToolTip(tooltip)
            act.setStatusTip(tooltip)
            if kind == "toggle":
                act.setCheckable(True)
                act.triggered.connect(callback)
                self.handles.toggle_tools.append(act)
            elif kind == "push":
                act.triggered.connect(lambda _checked=False, cb=callback: cb())
                self.handles.push_tools.append(act)
            else:
                raise ValueError(f"Unknown control kind in group {name}: {kind}")
            self.bar.addAction(act)
            button = self.bar.widgetForAction(act)
            if button is not None:
                button.installEventFilter(self._tooltips)

    def action(self, tag):
        return self.bar.findChild(QAction, tag)

    # -------- shared state used by both handlers --------

    @property
    def tooltips_enabled(self) -> bool:
        return self._tooltips.enabled

    def set_tooltips_enabled(self, enabled):
        self._tooltips.enabled = bool(enabled)

    def is_expanded(self) -> bool:
        return self.app_actions.is_expanded()

    def reset_expand(self):
        self.app_actions.reset_expand()

    def teardown(self):
        """Unhook every canvas handler once the window closes."""
        self.image_actions.cancel_crop()
        self.dispatcher.clear()


def image_toolbar(target=None, *, return_handles=True):
    """
    Insert a toolbar of image-manipulation tools into a figure window.

    Adds image-centric tools that augment the standard figure tools. When the
    window already shows the standard navigation toolbar, zoom and pan are
    not duplicated. Activates the pixel-value readout and highlights the
    current axes.

    Parameters
    ----------
    target : optional
        Any handle belonging to the window to enhance: the FigureWindow, a
        widget inside it, its canvas or Figure, or an Axes / AxesImage drawn
        in it. Defaults to the current window, created if none is open.
    return_handles : bool
        Return the ToolbarHandles record of the created controls.

    Returns
    -------
    ToolbarHandles or None
        None when the window already carries an image toolbar or when
        ``return_handles`` is false.

    Raises
    ------
    InvalidHandleError
        ``target`` does not belong to an open FigureWindow.

    Examples
    --------
    ::

        win = FigureWindow(toolbar=False)
        win.imshow(skimage.data.astronaut(), title="Astronaut")
        handles = image_toolbar(win)
    """
    if target is None:
        window = current_window()
        window.show()
        window.raise_()
    else:
        window = resolve_window(target)

    # Disallow duplicate toolbars
    if window.findChild(QToolBar, TOOLBAR_TAG) is not None:
        QApplication.beep()
        logger.warning("image_toolbar: This figure already contains an image toolstrip.")
        return None

    toolbar = ImageToolbar(window)
    logger.info(f"Image toolbar attached: {len(toolbar.handles.push_tools)} push tools, "
                f"{len(toolbar.handles.toggle_tools)} toggle tools")
    return toolbar.handles if return_handles else None
