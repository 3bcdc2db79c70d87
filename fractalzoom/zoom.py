"""Zoom state: pointer messages, cursor tracking and viewport updates."""

from __future__ import annotations

import enum
import queue
from dataclasses import dataclass
from typing import Optional, Protocol, Union

import numpy as np

from .errors import ConfigurationError
from .geometry import Bounds, Viewport, check_bounds


class Button(enum.Enum):
    LEFT = 1
    MIDDLE = 2
    RIGHT = 3


@dataclass(frozen=True)
class PointerMoved:
    """Absolute pointer position in device pixels, y measured up from the bottom edge."""

    x: int
    y: int


@dataclass(frozen=True)
class ButtonPressed:
    button: Button


@dataclass(frozen=True)
class ButtonReleased:
    button: Button


InputEvent = Union[PointerMoved, ButtonPressed, ButtonReleased]


@dataclass
class CursorPosition:
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class ZoomRequest:
    """Zoom in around the cursor position captured when the button went down."""

    x: int
    y: int


class _PixelPosition(Protocol):
    x: int
    y: int


@dataclass
class ZoomState:
    """Zoom depth relative to the initial viewport extent."""

    initial_width: float
    initial_height: float
    scaling_factor: float
    zoom_level: int = 0

    def __post_init__(self) -> None:
        if not self.scaling_factor > 1:
            raise ConfigurationError(f"Scaling factor must be greater than 1, got {self.scaling_factor!r}.")
        if not (self.initial_width > 0 and self.initial_height > 0):
            raise ConfigurationError(
                f"Initial extent must be positive, got {self.initial_width!r} x {self.initial_height!r}."
            )

    @classmethod
    def for_viewport(cls, viewport: Viewport, scaling_factor: float) -> "ZoomState":
        return cls(
            initial_width=viewport.width,
            initial_height=viewport.height,
            scaling_factor=scaling_factor,
        )

    def current_extent(self) -> tuple[float, float]:
        # Derived from the zoom level each time; overflow to inf just collapses the view.
        with np.errstate(over="ignore"):
            scale = np.float64(self.scaling_factor) ** self.zoom_level
        return (
            float(np.float64(self.initial_width) / scale),
            float(np.float64(self.initial_height) / scale),
        )


def zoom_in(cursor: _PixelPosition, viewport: Viewport, state: ZoomState, bounds: Bounds) -> Viewport:
    """Return a viewport ``scaling_factor`` times smaller, centered on the cursor.

    ``cursor.y`` must already be measured upward from the bottom of the canvas.
    Increments ``state.zoom_level``.
    """

    width, height = bounds
    re_range, im_range = state.current_extent()
    center_re = (cursor.x / width) * re_range + viewport.upper_left.real
    center_im = (cursor.y / height) * im_range + viewport.lower_right.imag
    half_re = re_range / (2.0 * state.scaling_factor)
    half_im = im_range / (2.0 * state.scaling_factor)

    state.zoom_level += 1
    return Viewport(
        complex(center_re - half_re, center_im + half_im),
        complex(center_re + half_re, center_im - half_im),
    )


class InputHandler:
    """Track the cursor and turn left-button press edges into zoom requests."""

    def __init__(self) -> None:
        self.cursor = CursorPosition()
        self._held: set[Button] = set()

    def handle(self, event: InputEvent) -> Optional[ZoomRequest]:
        if isinstance(event, PointerMoved):
            self.cursor.x = event.x
            self.cursor.y = event.y
            return None

        if isinstance(event, ButtonPressed):
            already_held = event.button in self._held
            self._held.add(event.button)
            if event.button is Button.LEFT and not already_held:
                return ZoomRequest(self.cursor.x, self.cursor.y)
            return None

        if isinstance(event, ButtonReleased):
            self._held.discard(event.button)
        return None


@dataclass(frozen=True)
class ViewSnapshot:
    viewport: Viewport
    zoom_level: int


class ZoomController:
    """Sole writer of the viewport.

    Requests may be submitted at any time; they are applied only by
    :meth:`apply_pending`, which the frame loop calls between frames, so a
    frame always renders from one consistent :class:`ViewSnapshot`.
    """

    def __init__(self, viewport: Viewport, scaling_factor: float, bounds: Bounds) -> None:
        self.bounds = check_bounds(bounds)
        self._viewport = viewport.validate()
        self.state = ZoomState.for_viewport(viewport, scaling_factor)
        self._requests: queue.SimpleQueue[ZoomRequest] = queue.SimpleQueue()

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def submit(self, request: ZoomRequest) -> None:
        self._requests.put(request)

    def apply_pending(self) -> bool:
        """Apply every queued request; return whether the viewport changed."""

        changed = False
        while True:
            try:
                request = self._requests.get_nowait()
            except queue.Empty:
                return changed
            self._viewport = zoom_in(request, self._viewport, self.state, self.bounds)
            changed = True

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(self._viewport, self.state.zoom_level)
