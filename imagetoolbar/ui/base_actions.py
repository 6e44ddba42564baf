"""
Base class for action handlers.

Provides common infrastructure for toolbar registration, the shared context
and the guards every button runs before acting.
"""
import logging

from PyQt5.QtWidgets import QApplication, QMessageBox

from ..models import ToolbarContext

logger = logging.getLogger(__name__)


class BaseActions:
    """
    Base class for all action handlers.

    Action handlers encapsulate related buttons and their callbacks.
    Each handler:
    - Holds a reference to the shared ToolbarContext
    - Registers its buttons with the toolbar
    - Implements callback methods for user actions

    Subclasses must implement stage_toolbar() to define their buttons.
    """

    def __init__(self, context: ToolbarContext, toolbar, parent=None):
        """
        Args:
            context: Shared toolbar context
            toolbar: ImageToolbar that owns the QToolBar and dispatcher
            parent: Parent widget for dialogs (the FigureWindow)
        """
        self.cxt = context
        self.toolbar = toolbar
        self.controller = parent
        self.stage_toolbar()

    @property
    def dispatcher(self):
        return self.toolbar.dispatcher

    def stage_toolbar(self):
        """
        Define and register toolbar buttons.

        Example:
            def stage_toolbar(self):
                self._register_group('Transform', [
                    ("push", "cropImage", icon, self.act_crop, "Crop Image"),
                    ("toggle", "zoomIn", icon, self.act_zoom_in, "Zoom in"),
                ])
        """
        raise NotImplementedError("Subclasses must implement stage_toolbar()")

    def _register_group(self, group_name: str, entries: list):
        """
        Register a group of buttons with the toolbar.

        Args:
            group_name: Label for the button group
            entries: List of button specifications in the format:
                     ("push", tag, icon, callback, tooltip)
                     ("toggle", tag, icon, callback, tooltip)
        """
        self.toolbar.add_group(group_name, entries)

    # ============ Helper Utilities ============

    def _beep(self):
        QApplication.beep()

    def _show_error(self, title: str, message: str):
        """Show a consistent error dialog."""
        QMessageBox.warning(self.controller, title, message)

    def _has_image(self):
        """
        Guard run before every image operation.

        Returns (ok, image) where image is the AxesImage of the current axes.
        """
        self.cxt.collect()
        if not self.cxt.has_images:
            logger.warning("Please display an image in the active figure to use this option.")
            return False, None
        imgs = self.cxt.images_in(self.cxt.current_axes())
        if len(imgs) > 1:
            self._beep()
            logger.warning("Ambiguous Command: Image axis contains multiple images")
        return True, (imgs[-1] if imgs else None)
