"""
Lookup of the image applications the toolbar can launch.

A companion is any callable taking the current image array (or, for
``expand_axes``, the clicked Axes) and returning the widget it opened.
Companions are resolved by name, first from the ``imagetoolbar.companions``
entry-point group so that installed packages can add or replace them, then
from the applications shipped in :mod:`imagetoolbar.apps`.
"""
import importlib
import logging
from importlib.metadata import entry_points

from ..config import COMPANION_URLS

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "imagetoolbar.companions"

BUILTIN = {
    "image_segmenter": "imagetoolbar.apps.segmenter:ImageSegmenter",
    "color_thresholder": "imagetoolbar.apps.color_thresholder:ColorThresholder",
    "image_region_analyzer": "imagetoolbar.apps.region_analyzer:RegionAnalyzer",
    "expand_axes": "imagetoolbar.apps.expand_axes:expand_axes",
}


def _installed(name):
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name == name:
            return ep
    return None


def find_companion(name):
    """Return the callable registered under ``name`` or None."""
    ep = _installed(name)
    if ep is not None:
        try:
            return ep.load()
        except ImportError:
            logger.error(f"Companion '{name}' is registered but failed to import", exc_info=True)
            return None

    target = BUILTIN.get(name)
    if target is None:
        return None
    module, attr = target.split(":")
    return getattr(importlib.import_module(module), attr)


def is_available(name) -> bool:
    return _installed(name) is not None or name in BUILTIN


def missing_note(name, label=None):
    """Message shown in place of a companion that is not installed."""
    label = label or name
    url = COMPANION_URLS.get(name)
    where = f"{label} ({url})" if url else label
    return (f"NOTE: Requires {where}.\n"
            f"Please install a package providing the '{name}' companion "
            f"(entry point group '{ENTRY_POINT_GROUP}') and try again!")
