"""
Open a copy of one image axes in its own, larger window.
"""
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas, NavigationToolbar2QT as NavigationTool
from matplotlib.figure import Figure
from PyQt5.QtWidgets import QMainWindow, QVBoxLayout, QWidget


class ExpandedAxesWindow(QMainWindow):
    def __init__(self, ax, parent=None):
        super().__init__(parent)
        title = ax.get_title()
        self.setWindowTitle(title or "Expanded axes")
        self.canvas = FigureCanvas(Figure(figsize=(8, 6)))
        self.ax = self.canvas.figure.add_subplot(111)
        for im in ax.get_images():
            self.ax.imshow(im.get_array(), cmap=im.get_cmap(), norm=im.norm,
                           extent=im.get_extent(), interpolation="nearest")
        self.ax.set_xlim(ax.get_xlim())
        self.ax.set_ylim(ax.get_ylim())
        self.ax.set_title(title)
        self.ax.set_axis_off()

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        self.toolbar = NavigationTool(self.canvas, central)
        layout.addWidget(self.canvas)
        layout.addWidget(self.toolbar)
        self.setCentralWidget(central)
        self.resize(900, 700)


def expand_axes(ax, parent=None):
    return ExpandedAxesWindow(ax, parent)
