"""
Global threshold segmenter.

Opens with Otsu's threshold of the image and lets the user move the cut
with a slider. The resulting binary mask is kept on ``.mask``.
"""
import logging

import cv2
import numpy as np
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from ..interface import tools as t

logger = logging.getLogger(__name__)


def otsu_threshold(gray: np.ndarray) -> int:
    """Otsu threshold of a uint8 grey image."""
    value, _ = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return int(value)


class ImageSegmenter(QMainWindow):
    def __init__(self, image, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Image Segmenter")
        self.gray = t.to_gray(image)
        self.threshold = otsu_threshold(self.gray)
        self.inverted = False
        self.mask = self.gray > self.threshold

        self.canvas = FigureCanvas(Figure(figsize=(8, 4)))
        self.ax_src, self.ax_mask = self.canvas.figure.subplots(1, 2)
        self.ax_src.imshow(self.gray, cmap="gray", vmin=0, vmax=255)
        self.ax_src.set_title("Original")
        self._mask_im = self.ax_mask.imshow(self.mask, cmap="gray", vmin=0, vmax=1)
        for ax in (self.ax_src, self.ax_mask):
            ax.set_axis_off()

        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(0, 255)
        self.slider.setValue(self.threshold)
        self.slider.valueChanged.connect(self.set_threshold)
        self.value_label = QLabel()
        self.invert_box = QCheckBox("Invert")
        self.invert_box.toggled.connect(self.set_inverted)

        controls = QHBoxLayout()
        controls.addWidget(QLabel("Threshold"))
        controls.addWidget(self.slider, 1)
        controls.addWidget(self.value_label)
        controls.addWidget(self.invert_box)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.canvas)
        layout.addLayout(controls)
        self.setCentralWidget(central)

        self._update()
        logger.debug(f"Segmenter opened on {self.gray.shape} image, Otsu threshold {self.threshold}")

    def set_threshold(self, value):
        self.threshold = int(value)
        self._update()

    def set_inverted(self, inverted):
        self.inverted = bool(inverted)
        self._update()

    def _update(self):
        mask = self.gray > self.threshold
        self.mask = ~mask if self.inverted else mask
        self._mask_im.set_data(self.mask)
        self.ax_mask.set_title(f"Mask ({int(self.mask.sum())} px)")
        self.value_label.setText(str(self.threshold))
        self.canvas.draw_idle()
