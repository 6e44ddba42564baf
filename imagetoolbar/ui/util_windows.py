"""
Auxiliary pop-up windows opened from the toolbar.

Contains the image metadata table, the pixel-region value viewer and the
busy-cursor helper shared by the action handlers.
"""

from contextlib import contextmanager

import numpy as np

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QApplication,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..interface import tools as t


@contextmanager
def busy_cursor(msg=None, window=None):
    """Temporarily set the cursor to busy; restores automatically."""
    QApplication.setOverrideCursor(Qt.WaitCursor)
    if window and hasattr(window, "statusBar") and msg:
        window.statusBar().showMessage(msg)
    try:
        yield
    finally:
        QApplication.restoreOverrideCursor()
        if window and hasattr(window, "statusBar"):
            window.statusBar().clearMessage()


class InfoTable(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.table = QTableWidget(0, 2, self)
        self.table.setHorizontalHeaderLabels(["Property", "Value"])
        self.table.horizontalHeader().setStretchLastSection(True)

        layout = QVBoxLayout(self)
        layout.addWidget(self.table)

    def add_row(self, key, value, editable=False):
        r = self.table.rowCount()
        self.table.insertRow(r)

        key_item = QTableWidgetItem(str(key))
        key_item.setFlags(key_item.flags() & ~Qt.ItemIsEditable)
        self.table.setItem(r, 0, key_item)

        val_item = QTableWidgetItem(str(value))
        if not editable:
            val_item.setFlags(val_item.flags() & ~Qt.ItemIsEditable)
        self.table.setItem(r, 1, val_item)

    def set_from_dict(self, d):
        self.table.setRowCount(0)
        for k, v in d.items():
            self.add_row(k, v, editable=False)

    def popup(self, title="Image info"):
        self.setWindowFlags(Qt.Window)
        self.setWindowTitle(title)
        self.setAttribute(Qt.WA_DeleteOnClose, True)
        self.resize(360, 220)
        self.show()
        return self


class PixelRegionWindow(QWidget):
    """
    Grid of raw pixel values around a point of an image.

    Row and column headers carry image coordinates so values can be located
    back in the figure.
    """
    def __init__(self, image: np.ndarray, row: int, col: int, size: int, parent=None):
        super().__init__(parent)
        self.block, self.row0, self.col0 = t.pixel_region(image, row, col, size)
        h, w = self.block.shape[:2]

        self.table = QTableWidget(h, w, self)
        self.table.setHorizontalHeaderLabels([str(self.col0 + c) for c in range(w)])
        self.table.setVerticalHeaderLabels([str(self.row0 + r) for r in range(h)])
        for r in range(h):
            for c in range(w):
                item = QTableWidgetItem(t.format_pixel(self.block[r, c]))
                item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                item.setTextAlignment(Qt.AlignCenter)
                self.table.setItem(r, c, item)
        self.table.resizeColumnsToContents()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.table)

        self.setWindowFlags(Qt.Window)
        self.setWindowTitle(f"Pixel Region ({row}, {col})")
        self.setAttribute(Qt.WA_DeleteOnClose, True)
