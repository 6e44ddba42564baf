"""
Array-level utility functions behind the toolbar buttons.

Loading, cropping, rotating and describing images, plus the small amount of
pixel arithmetic needed to condition toolbar icons. Nothing in here touches
Qt or matplotlib artists; the action handlers call these and redraw.
"""
from pathlib import Path

import cv2
import matplotlib
from matplotlib.colors import Normalize
import numpy as np
from PIL import Image

from .. import config

#==== Image loading ===========================================================


def load_image(path):
    """
    Read an image file into a numpy array.

    Palette images are expanded to RGB, 1-bit images become boolean masks and
    an alpha channel is dropped. Greyscale and RGB data keep their dtype.
    """
    p = Path(path)
    with Image.open(p) as img:
        if img.mode == "1":
            return np.asarray(img, dtype=bool)
        if img.mode in ("P", "RGBA", "LA", "CMYK", "YCbCr"):
            img = img.convert("L" if img.mode == "LA" else "RGB")
        return np.array(img)


def sample_image(name=None):
    """Bundled scikit-image sample used when a window has nothing to show."""
    from skimage import data

    name = name or config.con_dict["fallback_image"]
    loader = getattr(data, name, None)
    if loader is None:
        raise ValueError(f"Unknown sample image: {name}")
    return loader()

#==== Image type checks =======================================================


def is_rgb(img) -> bool:
    return img is not None and img.ndim == 3 and img.shape[2] == 3


def is_binary(img) -> bool:
    return img is not None and img.dtype == bool


def display_range(img):
    """(vmin, vmax) that imshow should use for a single-channel array."""
    if img.dtype == bool:
        return 0, 1
    if np.issubdtype(img.dtype, np.integer):
        info = np.iinfo(img.dtype)
        return info.min, info.max
    return 0.0, 1.0


def to_uint8(img):
    """Scale any single or three channel image to uint8 over its display range."""
    if img.dtype == np.uint8:
        return img
    if img.dtype == bool:
        return img.astype(np.uint8) * 255
    lo, hi = display_range(img)
    scaled = (np.asarray(img, dtype=float) - lo) / float(hi - lo)
    return (np.clip(scaled, 0.0, 1.0) * 255).round().astype(np.uint8)


def to_gray(img):
    """Single-channel uint8 version of an image, for thresholding."""
    img = to_uint8(img)
    if is_rgb(img):
        return cv2.cvtColor(np.ascontiguousarray(img), cv2.COLOR_RGB2GRAY)
    if img.ndim != 2:
        raise ValueError(f"Cannot convert image of shape {img.shape} to grey")
    return img


def to_rgb(img, cmap=None, norm=None):
    """
    Generate an RGB image from a single-channel array through a colormap.

    Mirrors what the figure shows: the image's own colormap and normalisation
    when given, otherwise grey over the dtype display range.
    """
    if is_rgb(img):
        return img
    if img.ndim != 2:
        raise ValueError(f"Cannot map image of shape {img.shape} to RGB")
    if isinstance(cmap, str) or cmap is None:
        cmap = matplotlib.colormaps[cmap or "gray"]
    if norm is None:
        lo, hi = display_range(img)
        norm = Normalize(vmin=lo, vmax=hi)
    rgba = cmap(norm(np.asarray(img, dtype=float)))
    return rgba[..., :3]

#======= Cropping and rotating ================================================


def crop(img, y_min, y_max, x_min, x_max):
    """
    Return a copy of ``img[y_min:y_max, x_min:x_max]``.

    Bounds are clamped to the image. A rectangle with no area leaves the
    image as it was.
    """
    h, w = img.shape[:2]
    y0, y1 = sorted((int(y_min), int(y_max)))
    x0, x1 = sorted((int(x_min), int(x_max)))
    y0 = max(0, y0); y1 = min(h, y1)
    x0 = max(0, x0); x1 = min(w, x1)
    if y1 <= y0 or x1 <= x0:
        return img.copy()
    return np.array(img[y0:y1, x0:x1, ...])


def rotate(img, angle):
    """
    Rotate counter-clockwise by ``angle`` degrees.

    Quarter turns are exact. Other angles use nearest-neighbour resampling
    onto a canvas large enough to hold the whole rotated image.
    """
    if angle % 90 == 0:
        return np.ascontiguousarray(np.rot90(img, k=int(angle // 90) % 4, axes=(0, 1)))

    h, w = img.shape[:2]
    m = cv2.getRotationMatrix2D((w / 2, h / 2), angle, 1.0)
    cos, sin = abs(m[0, 0]), abs(m[0, 1])
    new_w = int(np.ceil(h * sin + w * cos))
    new_h = int(np.ceil(h * cos + w * sin))
    m[0, 2] += new_w / 2 - w / 2
    m[1, 2] += new_h / 2 - h / 2

    src = img.astype(np.uint8) if img.dtype == bool else img
    out = cv2.warpAffine(src, m, (new_w, new_h), flags=cv2.INTER_NEAREST)
    if img.dtype == bool:
        return out.astype(bool)
    return out

#======= Image description ====================================================


def image_info(img, name="thisImg"):
    """Name / Size / Bytes / Class summary of an array."""
    size = "x".join(str(s) for s in img.shape)
    attributes = []
    if is_binary(img):
        attributes.append("logical")
    if is_rgb(img):
        attributes.append("rgb")
    return {
        "Name": name,
        "Size": size,
        "Bytes": int(img.nbytes),
        "Class": str(img.dtype),
        "Attributes": ", ".join(attributes),
    }


def format_pixel(value):
    arr = np.asarray(value)
    if arr.ndim == 0:
        if arr.dtype == bool:
            return str(int(arr))
        if np.issubdtype(arr.dtype, np.floating):
            return f"{float(arr):.4g}"
        return str(arr.item())
    return "[" + " ".join(format_pixel(v) for v in arr) + "]"


def pixel_region(img, row, col, size):
    """
    Square block of ``size`` x ``size`` pixels centred on (row, col).

    Returns (block, row_offset, col_offset); the block is clipped at the
    image border.
    """
    half = size // 2
    h, w = img.shape[:2]
    r0 = max(0, int(row) - half); r1 = min(h, int(row) + half + 1)
    c0 = max(0, int(col) - half); c1 = min(w, int(col) + half + 1)
    return img[r0:r1, c0:c1, ...], r0, c0

#======= Icon conditioning ====================================================


def condition_icon(icon, cmap=None, kind="scale", transparent=None):
    """
    Bring raw icon pixels into float RGB with NaN marking transparency.

    kind:
      "indexed" -> ``icon`` holds palette indices into ``cmap`` (N x 3)
      "scale"   -> integer data scaled into [0, 1]
      "none"    -> used as is
    transparent: value that becomes NaN (pixels equal to it are see-through)
    """
    if kind == "indexed":
        if cmap is None:
            raise ValueError("An indexed icon needs a colormap")
        cmap = np.asarray(cmap, dtype=float)
        if cmap.max() > 1:
            cmap = cmap / 255.0
        icon = cmap[np.clip(np.asarray(icon, dtype=int), 0, len(cmap) - 1)]
    elif kind == "scale":
        icon = np.asarray(icon)
        if icon.dtype == bool:
            icon = icon.astype(float)
        elif np.issubdtype(icon.dtype, np.integer):
            icon = icon.astype(float) / np.iinfo(icon.dtype).max
        else:
            icon = icon.astype(float)
    elif kind == "none":
        icon = np.asarray(icon, dtype=float)
    else:
        raise ValueError(f"Unknown icon conditioning: {kind}")

    if icon.ndim == 3 and icon.shape[2] == 4:
        # alpha becomes NaN transparency
        alpha = icon[..., 3]
        icon = icon[..., :3].copy()
        icon[alpha == 0] = np.nan
    elif icon.ndim == 2:
        icon = np.repeat(icon[..., None], 3, axis=2)

    if transparent is not None:
        icon = icon.copy()
        icon[icon == transparent] = np.nan
    return icon


def complement_icon(icon):
    """Photographic negative, leaving transparent pixels alone."""
    return 1.0 - icon


def resize_nearest(icon, size):
    h, w = icon.shape[:2]
    rows = np.floor(np.arange(size) * h / size).astype(int)
    cols = np.floor(np.arange(size) * w / size).astype(int)
    return icon[rows][:, cols]


def mark_points_icon(remove=False):
    """
    Crosshair with four corner ticks: blue on toolbar grey.

    The removal variant swaps foreground and background.
    """
    grid = np.ones((11, 11), dtype=bool)
    # column-major positions of the corner ticks
    ticks = np.array([1, 2, 3, 9, 10, 11, 12, 13, 21, 22, 23, 33,
                      89, 99, 100, 101, 109, 110, 111, 112, 113, 119, 120, 121]) - 1
    grid[np.unravel_index(ticks, grid.shape, order="F")] = False
    grid[5, :] = False
    grid[:, 5] = False
    if remove:
        grid = ~grid

    grey = config.con_dict["toolbar_grey"]
    icon = np.empty(grid.shape + (3,), dtype=float)
    icon[grid] = (grey, grey, grey)
    icon[~grid] = (0.0, 0.0, 1.0)
    return resize_nearest(icon, config.con_dict["icon_size"])


def line_icon():
    """Diagonal measuring line with end stops; background transparent."""
    size = config.con_dict["icon_size"]
    icon = np.full((size, size, 3), np.nan)
    idx = np.arange(2, size - 2)
    icon[size - 1 - idx, idx] = (0.0, 0.0, 0.0)
    for r, c in ((size - 3, 2), (2, size - 3)):
        icon[r - 1:r + 2, c - 1:c + 2] = (0.8, 0.0, 0.0)
    return icon


def crop_icon():
    """Two interlocking corner brackets."""
    size = config.con_dict["icon_size"]
    icon = np.full((size, size, 3), np.nan)
    dark = (0.1, 0.1, 0.1)
    icon[3:size - 1, 3] = dark
    icon[size - 4, 3:size - 1] = dark
    icon[0:size - 3, size - 4] = dark
    icon[3, 0:size - 3] = dark
    return icon


def grid_icon():
    """3 x 3 table of cells used for the pixel-region tool."""
    size = config.con_dict["icon_size"]
    icon = np.ones((size, size, 3))
    lines = np.linspace(0, size - 1, 4).round().astype(int)
    icon[lines, :] = 0.2
    icon[:, lines] = 0.2
    return icon
