"""
Callback handler for the image-centric toolbar buttons.

File and info tools, zoom/pan (when the window lacks the standard figure
toolbar), distance lines, point counting, pixel region, crop and rotate.
Also owns the current-axes highlight and the status-bar pixel readout.
"""
import logging
logger = logging.getLogger(__name__)

from pathlib import Path

from matplotlib.lines import Line2D
from matplotlib.widgets import RectangleSelector
import numpy as np

from PyQt5.QtWidgets import QAction, QFileDialog, QStyle

from ..config import con_dict
from ..interface import tools as t
from . import icons
from .base_actions import BaseActions
from .util_windows import InfoTable, PixelRegionWindow, busy_cursor

DISTANCE_TAG = "imline"
POINT_TAG = "impoint"
NAVIGATION_TOOLS = ("zoom", "pan")

ACKNOWLEDGEMENT = (
    "imageToolbar: image-centric tools for matplotlib figure windows.",
    "Built on matplotlib, PyQt5, OpenCV, Pillow and scikit-image.",
    "Comments/Suggestions welcome!",
)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.tif *.tiff *.bmp *.gif);;All files (*)"


def zoom_axes(ax, x, y, scale):
    """
    Scale the view of ``ax`` by ``scale`` around data point (x, y).

    The view never leaves the extent of the top image: a view as large as
    the image shows all of it, a smaller one is slid back inside.
    """
    x0, x1 = ax.get_xlim()
    y0, y1 = ax.get_ylim()
    w = (x1 - x0) * scale
    h = (y1 - y0) * scale
    xlim = (x - w / 2, x + w / 2)
    ylim = (y - h / 2, y + h / 2)
    imgs = ax.get_images()
    if imgs:
        left, right, bottom, top = imgs[-1].get_extent()
        if abs(w) >= abs(right - left) or abs(h) >= abs(top - bottom):
            ax.set_xlim(left, right)
            ax.set_ylim(bottom, top)
            return
        xlim = _slide_inside(xlim, left, right)
        ylim = _slide_inside(ylim, bottom, top)
    ax.set_xlim(*xlim)
    ax.set_ylim(*ylim)


def _slide_inside(lim, a, b):
    """Shift the interval ``lim`` into [a, b] keeping its width and direction."""
    lo, hi = min(lim), max(lim)
    vmin, vmax = min(a, b), max(a, b)
    shift = 0.0
    if lo < vmin:
        shift = vmin - lo
    elif hi > vmax:
        shift = vmax - hi
    return lim[0] + shift, lim[1] + shift


def pixel_span(a, b):
    """
    Pixel indices [start, stop) covered by the data interval between a and b.

    Pixel i spans data coordinates [i - 0.5, i + 0.5).
    """
    lo, hi = sorted((a, b))
    return int(np.floor(lo + 0.5)), int(np.floor(hi + 0.5)) + 1


def remove_tagged(figure, gid):
    """Remove every artist carrying ``gid`` from all axes of a figure."""
    removed = 0
    for ax in figure.axes:
        for artist in [a for a in ax.get_children() if a.get_gid() == gid]:
            artist.remove()
            removed += 1
    return removed


class ImageActions(BaseActions):
    """Image display, navigation, measurement and transform operations"""
    def __init__(self, context, toolbar, parent=None):
        self._selector = None
        self._crop_title = None
        self._distance_start = None
        self._pan_start = None
        super().__init__(context, toolbar, parent)

    def stage_toolbar(self):
        style = QStyle
        self._register_group("File", [
            ("push", "acknowledgements", icons.mpl_icon("matplotlib.png"),
             self.act_acknowledge, "Acknowledgements"),
            ("push", "INFO", icons.standard_icon(style.SP_MessageBoxInformation),
             self.act_image_info, "Show image metadata"),
            ("push", "loadImageTool", icons.standard_icon(style.SP_DialogOpenButton),
             self.act_load_image, "Load new image into current axes"),
            ("toggle", "toggleTooltips", icons.text_icon("?"),
             self.act_toggle_tooltips, "Toggle tooltips on or off"),
        ])
        # Zoom and pan would duplicate the standard figure toolbar
        if not self.controller.has_figure_toolbar:
            self._register_group("Navigate", [
                ("toggle", "zoomIn", icons.mpl_icon("zoom_to_rect.png"),
                 self.act_zoom_in, "Zoom in"),
                ("toggle", "zoomOut", icons.mpl_icon("zoom_to_rect.png", complement=True),
                 self.act_zoom_out, "Zoom out"),
                ("toggle", "pan", icons.mpl_icon("move.png"),
                 self.act_pan, "Toggle panning"),
            ])
        self._register_group("Measure", [
            ("push", "addDistanceTool", icons.array_to_qicon(t.line_icon()),
             self.act_add_distance, "Add distance tool"),
            ("push", "clearDistanceTools", icons.array_to_qicon(t.complement_icon(t.line_icon())),
             self.act_clear_distance, "Clear distance tool(s)"),
            ("push", "markImagePoints", icons.array_to_qicon(t.mark_points_icon()),
             self.act_mark_points, "Manually count objects"),
            ("push", "clearImagePoints", icons.array_to_qicon(t.mark_points_icon(remove=True)),
             self.act_clear_points, "Clear counting marks"),
            ("push", "impixelregiontool", icons.array_to_qicon(t.grid_icon()),
             self.act_pixel_region, "Pixel region tool"),
        ])
        self._register_group("Transform", [
            ("push", "cropImage", icons.array_to_qicon(t.crop_icon()),
             self.act_crop, "Crop Image"),
            ("push", "rotateLeft", icons.standard_icon(style.SP_BrowserReload, mirrored=True),
             self.act_rotate_left, "Rotate Left"),
            ("push", "rotateRight", icons.standard_icon(style.SP_BrowserReload),
             self.act_rotate_right, "Rotate Right"),
        ])

    # -------- caches and highlight --------

    def refresh_axes_images(self):
        """Rebuild image/axes caches; an empty window gets the sample image."""
        self.cxt.collect()
        if not self.cxt.images:
            name = con_dict["fallback_image"]
            logger.info(f"No image in figure, showing {name}.png")
            self.controller.imshow(t.sample_image(name), title=f"{name}.png")
            self.cxt.collect()
        return self.cxt.images, self.cxt.axes

    def current_axes_changed(self, *_):
        color = con_dict["highlight_color"]
        lw = con_dict["highlight_linewidth"]
        for ax in self.cxt.axes:
            for spine in ax.spines.values():
                spine.set_edgecolor(color)
                spine.set_linewidth(lw)
            ax.set_xticks([])
            ax.set_yticks([])
            ax.set_axis_off()
        # an empty (e.g. closing) figure must not get a new axes
        if self.controller.gca() is None:
            return
        cur = self.cxt.current_axes()
        if cur is not None:
            cur.set_axis_on()
        self.controller.canvas.draw_idle()

    def install_pixel_info(self):
        self.dispatcher.set_motion(self._pixel_info, temporary=False)

    def _pixel_info(self, event):
        label = self.controller.pixel_info
        ax = event.inaxes
        if ax is None or ax not in self.cxt.axes or event.xdata is None:
            label.setText("")
            return
        data = self.controller.image_data(ax.get_images()[-1])
        col = int(round(event.xdata))
        row = int(round(event.ydata))
        if 0 <= row < data.shape[0] and 0 <= col < data.shape[1]:
            label.setText(f"(X, Y) {col}, {row}  [{t.format_pixel(data[row, col])}]")
        else:
            label.setText("")

    # -------- click ownership --------

    def _find(self, tag):
        return self.toolbar.bar.findChild(QAction, tag)

    def _claim_clicks(self, name, handler):
        """Route single clicks to ``handler``; other navigation modes and a pending crop switch off."""
        self.cancel_crop()
        if self.cxt.active_tool in NAVIGATION_TOOLS and self.cxt.active_tool != name:
            self._stop_navigation()
        self.dispatcher.clear_all_temp()
        self.dispatcher.set_single_click(handler)
        self.cxt.active_tool = name

    def _release_clicks(self):
        self.dispatcher.clear_all_temp()
        self.cxt.active_tool = None

    def _stop_navigation(self):
        for tag in ("zoomIn", "zoomOut", "pan"):
            act = self._find(tag)
            if act is not None:
                act.setChecked(False)
        self.cxt.zoom.enabled = False
        self._pan_start = None
        if self.cxt.active_tool in NAVIGATION_TOOLS:
            self._release_clicks()

    # -------- FILE actions --------

    def act_acknowledge(self):
        for line in ACKNOWLEDGEMENT:
            logger.info(line)
        self.controller.statusBar().showMessage(" ".join(ACKNOWLEDGEMENT[:2]), 5000)

    def act_image_info(self):
        logger.info("Button clicked: Image info")
        ok, im = self._has_image()
        if not ok or im is None:
            return
        info = t.image_info(self.controller.image_data(im))
        logger.info(" | ".join(f"{k}: {v}" for k, v in info.items()))
        table = InfoTable()
        table.set_from_dict(info)
        title = im.axes.get_title() or "Image info"
        self.cxt.keep(table.popup(title))

    def act_load_image(self):
        logger.info("Button clicked: Load image")
        path, _ = QFileDialog.getOpenFileName(self.controller, "Load image", "", IMAGE_FILTER)
        if not path:
            return  # user cancelled
        try:
            with busy_cursor("Loading image...", self.controller):
                img = t.load_image(path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {path}", exc_info=True)
            self._show_error("Load image", f"Failed to load image: {e}")
            return
        self.show_new_image(img, Path(path).name)

    def show_new_image(self, img, title):
        """Display ``img`` in the current axes, replacing its image."""
        expanded = self.toolbar.is_expanded()
        self.controller.imshow(img, ax=self.cxt.current_axes(), title=title)
        self.refresh_axes_images()
        if expanded:
            self.toolbar.reset_expand()
        self.current_axes_changed()
        logger.info(f"Loaded {title}")

    def act_toggle_tooltips(self, checked=False):
        self.toolbar.set_tooltips_enabled(not checked)
        logger.info(f"Tooltips {'off' if checked else 'on'}")

    # -------- NAVIGATE actions --------

    def act_zoom_in(self, checked=False):
        self._zoom("in")

    def act_zoom_out(self, checked=False):
        self._zoom("out")

    def _zoom(self, direction):
        """Zoom in/out via the two toggles; re-clicking the active one turns zoom off."""
        zoom_in, zoom_out = self._find("zoomIn"), self._find("zoomOut")
        zoom_in.setChecked(False)
        zoom_out.setChecked(False)
        z = self.cxt.zoom
        if z.enabled and z.direction == direction:
            z.enabled = False
            self._release_clicks()
            return
        self._claim_clicks("zoom", self._zoom_click)
        z.direction = direction
        (zoom_in if direction == "in" else zoom_out).setChecked(True)
        z.enabled = True

    def _zoom_click(self, event):
        ax = event.inaxes
        if ax not in self.cxt.axes or event.xdata is None:
            return
        factor = con_dict["zoom_factor"]
        scale = 1.0 / factor if self.cxt.zoom.direction == "in" else factor
        zoom_axes(ax, event.xdata, event.ydata, scale)
        self.controller.canvas.draw_idle()

    def act_pan(self, checked=False):
        pan = self._find("pan")
        if self.cxt.active_tool == "pan":
            self._stop_navigation()
            return
        self._claim_clicks("pan", self._pan_press)
        self.dispatcher.set_motion(self._pan_motion)
        self.dispatcher.set_release(self._pan_release)
        pan.setChecked(True)

    def _pan_press(self, event):
        ax = event.inaxes
        self._pan_start = (ax, event.x, event.y, ax.get_xlim(), ax.get_ylim())

    def _pan_motion(self, event):
        if self._pan_start is None or event.x is None:
            return
        ax, px, py, xlim, ylim = self._pan_start
        bbox = ax.bbox
        dx = (event.x - px) * (xlim[1] - xlim[0]) / bbox.width
        dy = (event.y - py) * (ylim[1] - ylim[0]) / bbox.height
        ax.set_xlim(xlim[0] - dx, xlim[1] - dx)
        ax.set_ylim(ylim[0] - dy, ylim[1] - dy)
        self.controller.canvas.draw_idle()

    def _pan_release(self, event):
        self._pan_start = None

    # -------- MEASURE actions --------

    def act_add_distance(self):
        logger.info("Button clicked: Add distance tool")
        ok, _ = self._has_image()
        if not ok:
            return
        self._distance_start = None
        self._claim_clicks("distance", self._distance_click)
        self.controller.statusBar().showMessage("Click the two end points of the line", 5000)

    def _distance_click(self, event):
        ax = event.inaxes
        if ax not in self.cxt.axes:
            return
        x, y = event.xdata, event.ydata
        if self._distance_start is None or self._distance_start[0] is not ax:
            self._distance_start = (ax, x, y)
            return
        _, x0, y0 = self._distance_start
        self._distance_start = None
        self._release_clicks()

        ax.add_line(Line2D([x0, x], [y0, y], color="tab:blue", marker="s",
                           markersize=4, linewidth=1.5, gid=DISTANCE_TAG))
        dist = float(np.hypot(x - x0, y - y0))
        ax.text((x0 + x) / 2, (y0 + y) / 2, f"{dist:.2f}", color="tab:blue",
                fontsize=8, gid=DISTANCE_TAG,
                bbox=dict(facecolor="white", edgecolor="none", alpha=0.7, pad=1))
        logger.info(f"Distance: {dist:.2f} px")
        self.controller.canvas.draw_idle()

    def act_clear_distance(self):
        n = remove_tagged(self.cxt.figure, DISTANCE_TAG)
        logger.info(f"Cleared {n} distance artists")
        self.controller.canvas.draw_idle()

    def act_mark_points(self):
        logger.info("Button clicked: Count objects")
        ok, _ = self._has_image()
        if not ok:
            return
        self._claim_clicks("mark", self._mark_click)
        self.dispatcher.set_right_click(self._mark_finish)
        self.controller.statusBar().showMessage("Click to mark objects; right-click to finish", 5000)

    @staticmethod
    def marked_points(ax):
        return [ln for ln in ax.lines if ln.get_gid() == POINT_TAG]

    def _mark_click(self, event):
        ax = event.inaxes
        if ax not in self.cxt.axes:
            return
        n = len(self.marked_points(ax)) + 1
        ax.add_line(Line2D([event.xdata], [event.ydata], color="blue", marker="+",
                           markersize=10, markeredgewidth=1.5, linestyle="none",
                           gid=POINT_TAG))
        ax.text(event.xdata + 2, event.ydata - 2, str(n), color="blue",
                fontsize=8, gid=POINT_TAG)
        self.controller.statusBar().showMessage(f"{n} objects marked")
        self.controller.canvas.draw_idle()

    def _mark_finish(self, event):
        # right clicks finish counting anywhere on the canvas
        ax = event.inaxes
        if ax in self.cxt.axes:
            n = len(self.marked_points(ax))
        else:
            n = sum(len(self.marked_points(a)) for a in self.cxt.axes)
        self._release_clicks()
        logger.info(f"Counted {n} objects")
        self.controller.statusBar().showMessage(f"Counted {n} objects", 5000)

    def act_clear_points(self):
        n = remove_tagged(self.cxt.figure, POINT_TAG)
        logger.info(f"Cleared {n} counting marks")
        self.controller.canvas.draw_idle()

    def act_pixel_region(self):
        logger.info("Button clicked: Pixel region")
        ok, im = self._has_image()
        if not ok or im is None:
            return
        ax = im.axes
        col = int(round(sum(ax.get_xlim()) / 2))
        row = int(round(sum(ax.get_ylim()) / 2))
        win = PixelRegionWindow(self.controller.image_data(im), row, col,
                                con_dict["pixel_region_size"])
        self.cxt.keep(win)
        win.show()

    # -------- TRANSFORM actions --------

    def act_crop(self):
        logger.info("Button clicked: Crop")
        ok, im = self._has_image()
        if not ok or im is None:
            return
        self._stop_navigation()
        self.cancel_crop()
        # the drag that starts the crop must not also reach a click tool
        self._release_clicks()
        self.cxt.active_tool = "crop"
        ax = im.axes
        self._crop_title = ax.get_title()
        ax.set_title("Drag to crop; release to finish")
        span = con_dict["crop_min_span"]
        self._selector = RectangleSelector(
            ax, self._on_crop_select,
            useblit=True, button=[1],
            minspanx=span, minspany=span,
            spancoords="pixels", interactive=False
        )
        self.controller.canvas.draw_idle()

    def cancel_crop(self):
        """Drop a pending crop selector and put the axes title back."""
        if self._selector is None:
            return
        ax = self._selector.ax
        self._selector.set_active(False)
        self._selector.disconnect_events()
        self._selector = None
        if self._crop_title is not None:
            ax.set_title(self._crop_title)
            self._crop_title = None
        if self.cxt.active_tool == "crop":
            self.cxt.active_tool = None
        self.controller.canvas.draw_idle()

    def _on_crop_select(self, eclick, erelease):
        x0, x1 = pixel_span(eclick.xdata, erelease.xdata)
        y0, y1 = pixel_span(eclick.ydata, erelease.ydata)
        self.cancel_crop()
        self.crop_to(y0, y1, x0, x1)

    def crop_to(self, y0, y1, x0, x1):
        ok, im = self._has_image()
        if not ok or im is None:
            return
        new = t.crop(self.controller.image_data(im), y0, y1, x0, x1)
        self._replace_current(im, new)
        logger.info(f"Cropped to rows {y0}:{y1}, cols {x0}:{x1}")

    def act_rotate_left(self):
        self.rotate_by(90)

    def act_rotate_right(self):
        self.rotate_by(-90)

    def rotate_by(self, angle):
        logger.info(f"Button clicked: Rotate {angle:+g}")
        ok, im = self._has_image()
        if not ok or im is None:
            return
        new = t.rotate(self.controller.image_data(im), angle)
        self._replace_current(im, new)

    def _replace_current(self, im, new, title=None):
        """Swap the image of ``im``'s axes for ``new``, keeping title and modes."""
        ax = im.axes
        expanded = self.toolbar.is_expanded()
        if title is None:
            title = ax.get_title()
        self.controller.imshow(new, ax=ax, title=title)
        self.refresh_axes_images()
        self.current_axes_changed()
        if expanded:
            self.toolbar.reset_expand()
