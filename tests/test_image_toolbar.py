"""Attaching the image toolbar and driving its controls."""
import logging
from types import SimpleNamespace

import numpy as np
import pytest
from PyQt5.QtWidgets import QToolBar, QWidget

from imagetoolbar.interface import companions
from imagetoolbar.ui import TOOLBAR_TAG, InvalidHandleError, image_toolbar, resolve_window
from imagetoolbar.ui.image_actions import DISTANCE_TAG, POINT_TAG, pixel_span, zoom_axes


def _tags(handles):
    return [a.objectName() for a in handles.push_tools + handles.toggle_tools]


def _click(ax, x, y, button=1, dblclick=False):
    return SimpleNamespace(inaxes=ax, xdata=x, ydata=y, x=0, y=0,
                           button=button, dblclick=dblclick)


def _counts(win):
    axes = [ax for ax in win.fig.axes if ax.get_images()]
    return len(axes), sum(len(ax.get_images()) for ax in axes)


# -------- attachment --------

def test_attach_returns_handles(make_window, gray):
    win = make_window(images=[gray])
    handles = image_toolbar(win)
    assert handles.toolbar.objectName() == TOOLBAR_TAG
    tags = _tags(handles)
    for tag in ("INFO", "loadImageTool", "zoomIn", "zoomOut", "pan", "addDistanceTool",
                "markImagePoints", "cropImage", "rotateLeft", "rotateRight",
                "ImageSegmenter", "ColorThresholder", "expandAxes"):
        assert tag in tags
    assert {a.objectName() for a in handles.toggle_tools} == {
        "toggleTooltips", "zoomIn", "zoomOut", "pan"}


def test_second_attach_is_a_no_op(make_window, gray, caplog):
    win = make_window(images=[gray])
    assert image_toolbar(win) is not None
    with caplog.at_level(logging.WARNING):
        assert image_toolbar(win) is None
    assert "already contains an image toolstrip" in caplog.text
    assert len(win.findChildren(QToolBar, TOOLBAR_TAG)) == 1


def test_return_handles_false(make_window, gray):
    win = make_window(images=[gray])
    assert image_toolbar(win, return_handles=False) is None
    assert win.findChild(QToolBar, TOOLBAR_TAG) is not None


def test_empty_window_gets_sample_image(make_window):
    win = make_window()
    handles = image_toolbar(win)
    assert handles is not None
    assert _counts(win) == (1, 1)
    assert win.gca().get_title() == "coins.png"


def test_attach_through_axes_and_image_handles(make_window, gray, rgb):
    win = make_window(images=[gray])
    im = win.gca().get_images()[0]
    assert image_toolbar(im) is not None
    other = make_window(images=[rgb])
    assert image_toolbar(other.gca()) is not None
    assert other.findChild(QToolBar, TOOLBAR_TAG) is not None


def test_invalid_handle_raises(app):
    with pytest.raises(InvalidHandleError):
        image_toolbar("not a handle")
    with pytest.raises(ValueError):
        image_toolbar(QWidget())


def test_figure_toolbar_suppresses_navigation(make_window, gray):
    win = make_window(toolbar=True, images=[gray])
    tags = _tags(image_toolbar(win))
    assert "zoomIn" not in tags and "pan" not in tags
    assert "cropImage" in tags


# -------- transforms --------

def test_crop_keeps_counts_and_replaces_image(make_window, gray, rgb):
    win = make_window(images=[gray, rgb])
    image_toolbar(win)
    tb = win.image_toolbar
    before = win.gca().get_images()[0]
    counts = _counts(win)

    tb.image_actions.crop_to(5, 15, 10, 30)
    after = win.gca().get_images()[0]
    assert after is not before
    assert _counts(win) == counts
    assert win.image_data(after).shape == (10, 20, 3)


def test_rotate_swaps_shape(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    before = win.gca().get_images()[0]
    win.image_toolbar.action("rotateLeft").trigger()
    after = win.gca().get_images()[0]
    assert after is not before
    assert _counts(win) == (1, 1)
    assert np.array_equal(win.image_data(after), np.rot90(gray))
    assert win.gca().get_title() == "image 1"


# -------- modes --------

def test_zoom_toggles_are_mutually_exclusive(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    zin, zout = tb.action("zoomIn"), tb.action("zoomOut")

    zin.trigger()
    assert zin.isChecked() and not zout.isChecked()
    assert tb.cxt.zoom.enabled and tb.cxt.zoom.direction == "in"

    zout.trigger()
    assert zout.isChecked() and not zin.isChecked()
    assert tb.cxt.zoom.direction == "out"

    zout.trigger()
    assert not zin.isChecked() and not zout.isChecked()
    assert not tb.cxt.zoom.enabled
    assert tb.dispatcher.temporary_click is None


def test_zoom_click_changes_limits(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    ax = win.gca()
    width = np.diff(ax.get_xlim())[0]
    tb.action("zoomIn").trigger()
    tb.dispatcher.temporary_click(_click(ax, 30, 20))
    assert np.diff(ax.get_xlim())[0] == pytest.approx(width / 2)


def test_zoom_out_stops_at_image_extent(make_window, gray):
    win = make_window(images=[gray])
    ax = win.gca()
    extent = ax.get_images()[0].get_extent()
    zoom_axes(ax, 30, 20, 0.5)
    zoom_axes(ax, 30, 20, 4.0)
    assert ax.get_xlim() == pytest.approx(extent[:2])


def test_pan_releases_zoom(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    tb.action("zoomIn").trigger()
    tb.action("pan").trigger()
    assert tb.action("pan").isChecked()
    assert not tb.action("zoomIn").isChecked()
    assert not tb.cxt.zoom.enabled
    tb.action("pan").trigger()
    assert not tb.action("pan").isChecked()
    assert tb.cxt.active_tool is None


def test_tooltip_toggle(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    assert tb.tooltips_enabled
    tb.action("toggleTooltips").trigger()
    assert not tb.tooltips_enabled
    tb.action("toggleTooltips").trigger()
    assert tb.tooltips_enabled


def test_expand_toggle_survives_rotation(make_window, gray, caplog):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    with caplog.at_level(logging.INFO):
        tb.action("expandAxes").trigger()
    assert "expandAxes is ON!" in caplog.text
    assert tb.is_expanded()
    tb.image_actions.rotate_by(90)
    assert tb.is_expanded()
    tb.action("expandAxes").trigger()
    assert not tb.is_expanded()


def test_expand_double_click_opens_window(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    tb.action("expandAxes").trigger()
    ax = win.gca()
    tb.dispatcher.permanent_click(_click(ax, 5, 5))
    assert tb.cxt.windows == []
    tb.dispatcher.permanent_click(_click(ax, 5, 5, dblclick=True))
    assert len(tb.cxt.windows) == 1
    tb.cxt.windows[0].close()


# -------- preconditions --------

def test_color_thresholder_on_gray_changes_nothing(make_window, gray, caplog):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    im = win.gca().get_images()[0]
    with caplog.at_level(logging.WARNING):
        tb.action("ColorThresholder").trigger()
    assert "operates on color images" in caplog.text
    assert tb.cxt.windows == []
    assert win.gca().get_images()[0] is im
    assert np.array_equal(win.image_data(im), gray)


def test_segmenter_rejects_binary(make_window, gray, caplog):
    win = make_window(images=[gray > 128])
    image_toolbar(win)
    with caplog.at_level(logging.WARNING):
        win.image_toolbar.action("ImageSegmenter").trigger()
    assert "already binary" in caplog.text
    assert win.image_toolbar.cxt.windows == []


def test_builtin_companions_open(make_window, gray, rgb):
    win = make_window(images=[gray, rgb])
    image_toolbar(win)
    tb = win.image_toolbar
    win.set_current_axes(win.fig.axes[1])
    seg = tb.app_actions.act_image_segmenter()
    ct = tb.app_actions.act_color_thresholder()
    assert seg is not None and ct is not None
    assert len(tb.cxt.windows) == 2
    for w in list(tb.cxt.windows):
        w.close()


# -------- highlight --------

def test_exactly_one_axes_highlighted(make_window, gray, rgb):
    win = make_window(images=[gray, rgb, gray])
    image_toolbar(win)
    for ax in win.fig.axes:
        win.set_current_axes(ax)
        on = [a for a in win.fig.axes if a.axison]
        assert on == [ax]


# -------- companions --------

def test_missing_optional_companion_logs_note(make_window, gray, caplog):
    win = make_window(images=[gray])
    image_toolbar(win)
    with caplog.at_level(logging.WARNING):
        result = win.image_toolbar.app_actions.act_circle_finder()
    assert result is None
    assert "NOTE: Requires circleFinder" in caplog.text


def test_installed_optional_companion_gets_image(make_window, gray, monkeypatch):
    received = []

    def fake_morphology(image):
        received.append(image)
        return None

    monkeypatch.setattr(companions, "is_available", lambda name: True)
    monkeypatch.setattr(companions, "find_companion",
                        lambda name: fake_morphology if name == "image_morphology" else None)
    win = make_window(images=[gray])
    image_toolbar(win)
    win.image_toolbar.action("ImageMorphology").trigger()
    assert len(received) == 1
    assert np.array_equal(received[0], gray)


def test_explore_rgb_converts_gray(make_window, gray, monkeypatch):
    received = []
    monkeypatch.setattr(companions, "is_available", lambda name: True)
    monkeypatch.setattr(companions, "find_companion", lambda name: received.append)
    win = make_window(images=[gray])
    image_toolbar(win)
    win.image_toolbar.app_actions.act_explore_rgb()
    assert received[0].shape == gray.shape + (3,)


# -------- measurement --------

def test_distance_and_points_are_cleared(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    acts = win.image_toolbar.image_actions
    d = win.image_toolbar.dispatcher
    ax = win.gca()

    acts.act_add_distance()
    d.temporary_click(_click(ax, 1, 1))
    d.temporary_click(_click(ax, 4, 5))
    assert d.temporary_click is None
    assert any(a.get_gid() == DISTANCE_TAG for a in ax.lines)

    acts.act_mark_points()
    d.temporary_click(_click(ax, 10, 10))
    d.temporary_click(_click(ax, 20, 10))
    assert len(acts.marked_points(ax)) == 2
    acts._mark_finish(_click(ax, 0, 0, button=3))
    assert d.temporary_click is None

    acts.act_clear_distance()
    assert not [a for a in ax.get_children() if a.get_gid() == DISTANCE_TAG]
    assert len(acts.marked_points(ax)) == 2
    acts.act_clear_points()
    assert not [a for a in ax.get_children() if a.get_gid() == POINT_TAG]


def test_pixel_info_readout(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    ax = win.gca()
    win.image_toolbar.image_actions._pixel_info(_click(ax, 3, 2))
    assert win.pixel_info.text() == f"(X, Y) 3, 2  [{gray[2, 3]}]"
    win.image_toolbar.image_actions._pixel_info(_click(None, None, None))
    assert win.pixel_info.text() == ""


def test_info_and_pixel_region_windows(make_window, rgb):
    win = make_window(images=[rgb])
    image_toolbar(win)
    tb = win.image_toolbar
    tb.action("INFO").trigger()
    tb.action("impixelregiontool").trigger()
    info, region = tb.cxt.windows
    assert info.table.rowCount() == 5
    assert info.table.item(1, 1).text() == "30x50x3"
    assert region.block.shape == (7, 7, 3)
    for w in (info, region):
        w.close()


def test_closed_window_is_no_longer_a_valid_handle(make_window, gray):
    win = make_window(images=[gray])
    ax = win.gca()
    assert resolve_window(ax) is win
    win.close()
    with pytest.raises(InvalidHandleError):
        resolve_window(win)
    with pytest.raises(InvalidHandleError):
        image_toolbar(ax)


def test_close_unhooks_canvas_handlers(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    tb.action("expandAxes").trigger()
    tb.image_actions.act_crop()
    win.close()
    assert tb.dispatcher.permanent_click is None
    assert tb.dispatcher._cids == []
    assert tb.image_actions._selector is None


def test_actions_warn_once_images_are_gone(make_window, gray, caplog):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    win.gca().get_images()[0].remove()
    with caplog.at_level(logging.WARNING):
        tb.action("INFO").trigger()
        tb.action("rotateLeft").trigger()
    assert caplog.text.count("Please display an image in the active figure") == 2
    assert tb.cxt.windows == []
    assert _counts(win) == (0, 0)


# -------- view limits --------

def test_zoom_out_near_edge_stays_inside_image(make_window, gray):
    win = make_window(images=[gray])
    ax = win.gca()
    left, right, bottom, top = ax.get_images()[0].get_extent()
    zoom_axes(ax, 5, 20, 0.5)
    zoom_axes(ax, 2, 20, 0.5)
    zoom_axes(ax, 2, 20, 2.0)
    x0, x1 = ax.get_xlim()
    assert min(x0, x1) >= left
    assert max(x0, x1) <= right
    assert x1 - x0 == pytest.approx(30)
    assert ax.get_xlim() == pytest.approx((left, left + 30))


def test_zoom_near_top_edge_keeps_y_direction(make_window, gray):
    win = make_window(images=[gray])
    ax = win.gca()
    zoom_axes(ax, 30, 1, 0.5)
    y0, y1 = ax.get_ylim()
    # origin="upper": y runs downwards
    assert y0 > y1
    assert (y0, y1) == pytest.approx((19.5, -0.5))


def test_zoom_clicks_near_corner_never_leave_image(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    ax = win.gca()
    tb.action("zoomIn").trigger()
    tb.dispatcher.temporary_click(_click(ax, 58, 38))
    tb.action("zoomOut").trigger()
    for _ in range(3):
        tb.dispatcher.temporary_click(_click(ax, 58, 38))
        x0, x1 = ax.get_xlim()
        y0, y1 = ax.get_ylim()
        assert -0.5 <= x0 < x1 <= 59.5
        assert 39.5 >= y0 > y1 >= -0.5


# -------- crop ownership and pixel mapping --------

def test_pixel_span_follows_pixel_centres():
    assert pixel_span(2.7, 7.3) == (3, 8)
    assert pixel_span(7.3, 2.7) == (3, 8)
    assert pixel_span(-0.5, 0.4) == (0, 1)
    assert pixel_span(0.5, 1.49) == (1, 2)


def test_crop_selection_maps_to_covered_pixels(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    acts = tb.image_actions
    acts.act_crop()
    acts._on_crop_select(SimpleNamespace(xdata=2.7, ydata=2.7),
                         SimpleNamespace(xdata=7.3, ydata=7.3))
    ax = win.gca()
    assert np.array_equal(win.image_data(ax.get_images()[0]), gray[3:8, 3:8])
    assert ax.get_title() == "image 1"
    assert acts._selector is None
    assert tb.cxt.active_tool is None


def test_crop_takes_clicks_from_pending_tool(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    acts = tb.image_actions
    ax = win.gca()

    acts.act_mark_points()
    acts.act_crop()
    assert tb.cxt.active_tool == "crop"
    assert tb.dispatcher.temporary_click is None
    tb.dispatcher._shim_press(_click(ax, 10, 10))
    assert acts.marked_points(ax) == []
    assert ax.get_title() == "Drag to crop; release to finish"


def test_click_tool_cancels_pending_crop(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    tb = win.image_toolbar
    acts = tb.image_actions
    ax = win.gca()

    acts.act_crop()
    tb.action("zoomIn").trigger()
    assert acts._selector is None
    assert ax.get_title() == "image 1"
    assert tb.cxt.active_tool == "zoom"

    acts.act_crop()
    acts.act_add_distance()
    assert acts._selector is None
    assert tb.cxt.active_tool == "distance"
    assert not tb.action("zoomIn").isChecked()


def test_right_click_outside_axes_finishes_counting(make_window, gray):
    win = make_window(images=[gray])
    image_toolbar(win)
    acts = win.image_toolbar.image_actions
    d = win.image_toolbar.dispatcher
    ax = win.gca()
    acts.act_mark_points()
    d._shim_press(_click(ax, 10, 10))
    d._shim_press(_click(ax, 20, 12))
    d._shim_press(_click(None, None, None, button=3))
    assert d.temporary_click is None
    assert win.image_toolbar.cxt.active_tool is None
    assert win.statusBar().currentMessage() == "Counted 2 objects"
