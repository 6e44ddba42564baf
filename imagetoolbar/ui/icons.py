"""
Toolbar icon loading.

Icons come from three places: the toolbar images bundled with matplotlib,
Qt's standard style icons, and small numpy arrays drawn in
``interface.tools``. Array icons are float RGB with NaN for transparency
(see ``tools.condition_icon``) and are converted to QIcon here.
"""
from pathlib import Path

import matplotlib
import numpy as np
from PIL import Image

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QFont, QIcon, QImage, QPainter, QPixmap
from PyQt5.QtWidgets import QApplication

from ..config import con_dict
from ..interface import tools as t

MPL_ICON_PATH = Path(matplotlib.get_data_path()) / "images"


def read_mpl_icon(name):
    """Raw pixels of one of matplotlib's toolbar images (e.g. 'move.png')."""
    with Image.open(MPL_ICON_PATH / name) as img:
        return np.array(img.convert("RGBA"))


def array_to_qicon(icon):
    """Float RGB(A) in [0, 1], NaN = transparent, to a QIcon."""
    icon = np.asarray(icon, dtype=float)
    if icon.ndim == 2:
        icon = np.repeat(icon[..., None], 3, axis=2)
    rgb = icon[..., :3]
    transparent = np.isnan(rgb).any(axis=2)
    h, w = rgb.shape[:2]

    rgba = np.zeros((h, w, 4), dtype=np.uint8)
    rgba[..., :3] = (np.clip(np.nan_to_num(rgb), 0.0, 1.0) * 255).round().astype(np.uint8)
    rgba[..., 3] = np.where(transparent, 0, 255)
    rgba = np.ascontiguousarray(rgba)

    qimg = QImage(rgba.data, w, h, 4 * w, QImage.Format_RGBA8888).copy()
    return QIcon(QPixmap.fromImage(qimg))


def mpl_icon(name, complement=False):
    icon = t.condition_icon(read_mpl_icon(name), kind="scale")
    if complement:
        icon = t.complement_icon(icon)
    return array_to_qicon(icon)


def standard_icon(pixmap, mirrored=False):
    """A QStyle.StandardPixmap as QIcon, optionally flipped left-right."""
    icon = QApplication.style().standardIcon(pixmap)
    if not mirrored:
        return icon
    size = con_dict["icon_size"]
    img = icon.pixmap(size, size).toImage().mirrored(True, False)
    return QIcon(QPixmap.fromImage(img))


def text_icon(text, color="#204a87"):
    """Short label painted onto a transparent square, for the app launchers."""
    size = con_dict["icon_size"] * 2
    pix = QPixmap(size, size)
    pix.fill(Qt.transparent)
    painter = QPainter(pix)
    font = QFont()
    font.setBold(True)
    font.setPixelSize(int(size * (0.7 if len(text) == 1 else 0.45)))
    painter.setFont(font)
    painter.setPen(QColor(color))
    painter.drawText(pix.rect(), Qt.AlignCenter, text)
    painter.end()
    return QIcon(pix)

