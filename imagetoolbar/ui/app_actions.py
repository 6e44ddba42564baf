"""
Callback handler for the companion-application buttons.

Each button checks the current image, checks that its application is
available, and hands the image array over. Missing applications and
unsuitable images are reported and otherwise ignored.
"""
import logging
logger = logging.getLogger(__name__)

from PyQt5.QtWidgets import QStyle

from ..interface import companions
from ..interface import tools as t
from . import icons
from .base_actions import BaseActions


class AppActions(BaseActions):
    """Companion applications and expand-axes mode"""

    def stage_toolbar(self):
        self._register_group("Apps", [
            ("push", "ImageSegmenter", icons.text_icon("Sg"),
             self.act_image_segmenter, "Call imageSegmenter"),
            ("push", "segmentImage", icons.text_icon("sI", "#4e9a06"),
             self.act_segment_image, "Call segmentImage"),
            ("push", "ColorThresholder", icons.text_icon("CT", "#a40000"),
             self.act_color_thresholder, "Call colorThresholder"),
            ("push", "ImageMorphology", icons.text_icon("Mo", "#4e9a06"),
             self.act_image_morphology, "Call imageMorphology"),
            ("push", "ImageRegionAnalyzer", icons.text_icon("RA"),
             self.act_region_analyzer, "Call imageRegionAnalyzer"),
            ("push", "circleFinder", icons.text_icon("O", "#4e9a06"),
             self.act_circle_finder, "Call circleFinder"),
            ("push", "imageAdjuster", icons.text_icon("Ad", "#4e9a06"),
             self.act_image_adjuster, "Call imageAdjuster"),
            ("push", "ExploreRGB", icons.text_icon("RGB", "#5c3566"),
             self.act_explore_rgb, "Call ExploreRGB"),
        ])
        self._register_group("View", [
            ("push", "expandAxes", icons.standard_icon(QStyle.SP_TitleBarMaxButton),
             self.act_toggle_expand_axes, "Toggle expandAxes"),
        ])

    # -------- launching --------

    def _missing(self, name, label):
        self._beep()
        logger.warning(companions.missing_note(name, label))

    def _launch(self, name, *args):
        """Open companion ``name``; its window is kept alive by the context."""
        factory = companions.find_companion(name)
        if factory is None:
            self._missing(name, name)
            return None
        widget = factory(*args)
        if widget is not None:
            self.cxt.keep(widget)
            if hasattr(widget, "show"):
                widget.show()
        logger.info(f"Opened {name}")
        return widget

    def _current(self):
        ok, im = self._has_image()
        if not ok or im is None:
            return None, None
        return im, self.controller.image_data(im)

    def _call_optional(self, name, label):
        im, img = self._current()
        if im is None:
            return None
        if not companions.is_available(name):
            self._missing(name, label)
            return None
        return self._launch(name, img)

    # -------- APPS actions --------

    def act_image_segmenter(self):
        logger.info("Button clicked: imageSegmenter")
        im, img = self._current()
        if im is None:
            return None
        if t.is_binary(img):
            self._beep()
            logger.warning("Image is already binary!")
            return None
        return self._launch("image_segmenter", img)

    def act_color_thresholder(self):
        logger.info("Button clicked: colorThresholder")
        im, img = self._current()
        if im is None:
            return None
        if not t.is_rgb(img):
            self._beep()
            logger.warning("ColorThresholder operates on color images!")
            return None
        return self._launch("color_thresholder", img)

    def act_region_analyzer(self):
        logger.info("Button clicked: imageRegionAnalyzer")
        im, img = self._current()
        if im is None:
            return None
        if not t.is_binary(img):
            self._beep()
            logger.warning("ImageRegionAnalyzer operates on binary images!")
            return None
        return self._launch("image_region_analyzer", img)

    def act_segment_image(self):
        logger.info("Button clicked: segmentImage")
        return self._call_optional("segment_image", "segmentImage")

    def act_image_morphology(self):
        logger.info("Button clicked: imageMorphology")
        return self._call_optional("image_morphology", "imageMorphology")

    def act_circle_finder(self):
        logger.info("Button clicked: circleFinder")
        return self._call_optional("circle_finder", "circleFinder")

    def act_image_adjuster(self):
        logger.info("Button clicked: imageAdjuster")
        return self._call_optional("image_adjuster", "imageAdjuster")

    def act_explore_rgb(self):
        logger.info("Button clicked: ExploreRGB")
        im, img = self._current()
        if im is None:
            return None
        if not companions.is_available("explore_rgb"):
            self._missing("explore_rgb", "exploreRGB")
            return None
        if t.is_rgb(img):
            return self._launch("explore_rgb", img)

        self._beep()
        logger.info("Current image is not RGB; generating RGB image from the image colormap.")
        try:
            rgb = t.to_rgb(img, im.get_cmap(), im.norm)
        except ValueError:
            logger.warning("Unable to open this image in ExploreRGB; ExploreRGB operates on color (RGB) images!",
                           exc_info=True)
            return None
        return self._launch("explore_rgb", rgb)

    # -------- VIEW actions --------

    def is_expanded(self) -> bool:
        return self.dispatcher.permanent_click == self._expand_clicked

    def act_toggle_expand_axes(self):
        if not companions.is_available("expand_axes"):
            self._missing("expand_axes", "expandAxes")
            return
        if self.is_expanded():
            self.dispatcher.clear_perm_click()
            logger.info("expandAxes is OFF!")
        else:
            self.dispatcher.set_single_click(self._expand_clicked, temporary=False)
            logger.info("expandAxes is ON!")

    def reset_expand(self):
        """Re-arm expand mode after the image axes have been rebuilt."""
        self.dispatcher.clear_perm_click()
        self.act_toggle_expand_axes()

    def _expand_clicked(self, event):
        if not event.dblclick or event.inaxes not in self.cxt.axes:
            return
        self._launch("expand_axes", event.inaxes)
