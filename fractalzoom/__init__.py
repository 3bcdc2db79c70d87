"""Public API for escape-time fractal rendering and zooming."""

from .colors import ColorTable, build_color_table, get_colormap, parse_hex_color
from .errors import ConfigurationError
from .geometry import Viewport, band_points, pixel_to_point, point_to_pixel
from .kernel import Recurrence, cubic_escape_time, escape_time
from .renderer import Band, FrameRenderer, new_buffer, render, render_band, split_bands
from .zoom import (
    Button,
    ButtonPressed,
    ButtonReleased,
    CursorPosition,
    InputHandler,
    PointerMoved,
    ViewSnapshot,
    ZoomController,
    ZoomRequest,
    ZoomState,
    zoom_in,
)

__all__ = [
    "Band",
    "Button",
    "ButtonPressed",
    "ButtonReleased",
    "ColorTable",
    "ConfigurationError",
    "CursorPosition",
    "FrameRenderer",
    "InputHandler",
    "PointerMoved",
    "Recurrence",
    "ViewSnapshot",
    "Viewport",
    "ZoomController",
    "ZoomRequest",
    "ZoomState",
    "band_points",
    "build_color_table",
    "cubic_escape_time",
    "escape_time",
    "get_colormap",
    "new_buffer",
    "parse_hex_color",
    "pixel_to_point",
    "point_to_pixel",
    "render",
    "render_band",
    "split_bands",
    "zoom_in",
]
