"""
Global configuration dictionary and default parameters used across imagetoolbar.

Stores zoom behaviour, axes highlighting, icon sizing and the reference pages
of the optional companion applications.
"""

con_dict = {
    # navigation
    "zoom_factor": 2.0,

    # current-axes highlight
    "highlight_color": "#00bf00",
    "highlight_linewidth": 2.0,

    # icons
    "icon_size": 16,
    "toolbar_grey": 240 / 255,   # toolbar background, approximately

    # tools
    "pixel_region_size": 7,
    "crop_min_span": 5,
    "fallback_image": "coins",
}


COMPANION_URLS = {
    "segment_image": "http://www.mathworks.com/matlabcentral/fileexchange/48859-segment-images-interactively--and-generate-matlab-code",
    "image_morphology": "http://www.mathworks.com/matlabcentral/fileexchange/23697-image-morphology",
    "circle_finder": "http://www.mathworks.com/matlabcentral/fileexchange/34365-circle-finder",
    "image_adjuster": "http://www.mathworks.com/matlabcentral/fileexchange/955-imageadjuster",
    "explore_rgb": "http://www.mathworks.com/matlabcentral/fileexchange/19706-explorergb",
    "expand_axes": "http://www.mathworks.com/matlabcentral/fileexchange/18291-expandaxes-hndls-rotenable-",
}


def set_value(key, value):
    if key not in con_dict:
        raise KeyError(key)
    # naive cast
    ty = type(con_dict[key])
    con_dict[key] = ty(value)


def get_all():
    return con_dict
