"""
Data models shared by the toolbar handlers.

- ToolbarContext:
    The explicit context every handler receives: the target window, the
    cached image/axes lists, zoom state and the companion windows kept alive.

- ToolbarHandles:
    Record of every control created on a window, returned to the caller.

- ZoomState:
    Enabled flag and direction of the toolbar's zoom mode.
"""

from .context import ToolbarContext, ToolbarHandles, ZoomState

__all__ = ["ToolbarContext", "ToolbarHandles", "ZoomState"]
