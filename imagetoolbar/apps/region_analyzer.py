"""
Connected-region measurements of a binary image.
"""
import logging

import numpy as np
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QMainWindow, QSplitter, QTableWidget, QTableWidgetItem
from skimage.color import label2rgb
from skimage.measure import label, regionprops_table

logger = logging.getLogger(__name__)

PROPERTIES = ("label", "area", "centroid", "eccentricity", "perimeter", "solidity")


def measure_regions(mask):
    """Label 8-connected regions of ``mask`` and tabulate their properties."""
    labels = label(np.asarray(mask, dtype=bool), connectivity=2)
    table = regionprops_table(labels, properties=PROPERTIES)
    return labels, table


class RegionAnalyzer(QMainWindow):
    def __init__(self, image, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Image Region Analyzer")
        self.labels, self.regions = measure_regions(image)

        self.canvas = FigureCanvas(Figure(figsize=(5, 4)))
        ax = self.canvas.figure.add_subplot(111)
        ax.imshow(label2rgb(self.labels, bg_label=0))
        ax.set_title(f"{self.region_count} regions")
        ax.set_axis_off()

        columns = list(self.regions.keys())
        self.table = QTableWidget(self.region_count, len(columns), self)
        self.table.setHorizontalHeaderLabels(columns)
        order = np.argsort(self.regions["area"])[::-1]
        for r, idx in enumerate(order):
            for c, key in enumerate(columns):
                value = self.regions[key][idx]
                text = f"{value:.4g}" if isinstance(value, (float, np.floating)) else str(value)
                item = QTableWidgetItem(text)
                item.setFlags(item.flags() & ~Qt.ItemIsEditable)
                self.table.setItem(r, c, item)
        self.table.resizeColumnsToContents()

        splitter = QSplitter(Qt.Horizontal, self)
        splitter.addWidget(self.canvas)
        splitter.addWidget(self.table)
        self.setCentralWidget(splitter)
        logger.info(f"Region analyzer found {self.region_count} regions")

    @property
    def region_count(self) -> int:
        return len(self.regions["label"])
