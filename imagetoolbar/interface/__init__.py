"""
imagetoolbar Interface Package
==============================

The lightweight layer between canvas events and the image operations the
toolbar buttons perform.

It provides:

- ``ToolDispatcher``
  Routes matplotlib mouse events from a figure canvas to whichever tool is
  active. Tools register temporary or permanent handlers for:
      * single-click (press) events
      * right-click events
      * motion events
      * release events

- ``tools``
  Stateless functions on numpy arrays: loading, cropping, rotating,
  describing images and conditioning icon pixels.

- ``companions``
  Resolves the image applications launched from the toolbar, either built
  in or installed through the ``imagetoolbar.companions`` entry points.

Typical Usage
-------------
::

    disp = ToolDispatcher(window.canvas)
    disp.set_single_click(handle_pick)
    disp.set_motion(show_pixel, temporary=False)
"""

from .tool_dispatcher import ToolDispatcher
