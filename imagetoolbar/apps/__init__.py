"""
Built-in companion applications launched from the image toolbar.

Each module exposes a factory that takes the current image array (or, for
expand_axes, the clicked Axes) and returns a window ready to be shown.
"""
