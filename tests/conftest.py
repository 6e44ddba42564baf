"""Shared fixtures: a headless QApplication and throwaway figure windows."""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest
from PyQt5.QtWidgets import QApplication

from imagetoolbar.ui import figure_window


@pytest.fixture(scope="session")
def app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def make_window(app):
    """Factory for FigureWindows that are closed after the test."""
    created = []

    def _make(toolbar=False, images=()):
        win = figure_window.FigureWindow(toolbar=toolbar)
        for i, img in enumerate(images, start=1):
            ax = win.subplot(1, len(images), i)
            win.imshow(img, ax=ax, title=f"image {i}")
        created.append(win)
        return win

    yield _make
    for win in created:
        win.close()
        figure_window.unregister(win)
        win.deleteLater()


@pytest.fixture
def gray():
    rng = np.random.default_rng(0)
    return rng.integers(0, 256, size=(40, 60), dtype=np.uint8)


@pytest.fixture
def rgb():
    rng = np.random.default_rng(1)
    return rng.integers(0, 256, size=(30, 50, 3), dtype=np.uint8)
