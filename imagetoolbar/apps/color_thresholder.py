"""
Per-channel colour thresholding of RGB images.
"""
import logging

import numpy as np
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QFormLayout,
    QHBoxLayout,
    QMainWindow,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from ..interface import tools as t

logger = logging.getLogger(__name__)

CHANNELS = ("Red", "Green", "Blue")


class ColorThresholder(QMainWindow):
    """
    Keeps the pixels whose R, G and B values all lie inside the chosen
    ranges. ``.mask`` holds the selection; the preview blacks out the rest.
    """
    def __init__(self, image, parent=None):
        super().__init__(parent)
        if not t.is_rgb(image):
            raise ValueError("ColorThresholder operates on color images!")
        self.setWindowTitle("Color Thresholder")
        self.rgb = t.to_uint8(image)[..., :3]
        self.ranges = [[0, 255] for _ in CHANNELS]
        self.mask = np.ones(self.rgb.shape[:2], dtype=bool)

        self.canvas = FigureCanvas(Figure(figsize=(8, 4)))
        self.ax_img, self.ax_mask = self.canvas.figure.subplots(1, 2)
        self._img = self.ax_img.imshow(self.rgb)
        self._mask_im = self.ax_mask.imshow(self.mask, cmap="gray", vmin=0, vmax=1)
        self.ax_img.set_title("Selection")
        self.ax_mask.set_title("Mask")
        for ax in (self.ax_img, self.ax_mask):
            ax.set_axis_off()

        form = QFormLayout()
        self.sliders = []
        for i, name in enumerate(CHANNELS):
            lo = self._slider(0)
            hi = self._slider(255)
            lo.valueChanged.connect(lambda v, ch=i: self.set_range(ch, low=v))
            hi.valueChanged.connect(lambda v, ch=i: self.set_range(ch, high=v))
            row = QHBoxLayout()
            row.addWidget(lo)
            row.addWidget(hi)
            form.addRow(name, row)
            self.sliders.append((lo, hi))

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.canvas)
        layout.addLayout(form)
        self.setCentralWidget(central)

    @staticmethod
    def _slider(value):
        s = QSlider(Qt.Horizontal)
        s.setRange(0, 255)
        s.setValue(value)
        return s

    def set_range(self, channel, low=None, high=None):
        """Update one channel's inclusive range and recompute the mask."""
        rng = self.ranges[channel]
        if low is not None:
            rng[0] = int(low)
        if high is not None:
            rng[1] = int(high)
        self._update()

    def _update(self):
        mask = np.ones(self.rgb.shape[:2], dtype=bool)
        for ch, (lo, hi) in enumerate(self.ranges):
            band = self.rgb[..., ch]
            mask &= (band >= lo) & (band <= hi)
        self.mask = mask
        self._img.set_data(np.where(mask[..., None], self.rgb, 0).astype(np.uint8))
        self._mask_im.set_data(mask)
        self.canvas.draw_idle()
        logger.debug(f"Colour ranges {self.ranges}: {int(mask.sum())} px selected")
