"""pygame window that presents frames and feeds pointer input to the zoom controller."""

from __future__ import annotations

import os
import time
from typing import Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from .renderer import FrameRenderer, new_buffer
from .zoom import (
    Button,
    ButtonPressed,
    ButtonReleased,
    InputEvent,
    InputHandler,
    PointerMoved,
    ZoomController,
)

_BUTTONS = {
    1: Button.LEFT,
    2: Button.MIDDLE,
    3: Button.RIGHT,
}


def translate_event(event: pygame.event.Event, height: int, dpi_scale: float = 1.0) -> Optional[InputEvent]:
    """Convert a pygame event to an input message.

    Pointer positions are scaled to device pixels, then flipped against
    ``height`` (the canvas height in device pixels) so that y grows upward
    from the bottom edge.
    """

    if event.type == pygame.MOUSEMOTION:
        x, y = event.pos
        return PointerMoved(int(x * dpi_scale), height - int(y * dpi_scale))

    if event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
        button = _BUTTONS.get(event.button)
        if button is None:
            return None
        if event.type == pygame.MOUSEBUTTONDOWN:
            return ButtonPressed(button)
        return ButtonReleased(button)

    return None


class Explorer:
    """Interactive zoom loop: input between frames, render only on change."""

    def __init__(
        self,
        controller: ZoomController,
        renderer: FrameRenderer,
        *,
        title: str = "Mandelbrot",
        dpi_scale: float = 1.0,
    ) -> None:
        self.controller = controller
        self.renderer = renderer
        self.title = title
        self.dpi_scale = dpi_scale
        self.input = InputHandler()
        self.buffer = new_buffer(controller.bounds)

        self.needs_render = True
        self.running = True
        self.frame_times: list[float] = []

        # Initialized in run()
        self.screen = None
        self.clock = None

    def run(self) -> None:
        self._init_pygame()
        try:
            while self.running:
                self._handle_events()
                if self.controller.apply_pending():
                    self.needs_render = True
                self._render_if_needed()
                self.clock.tick(60)
        finally:
            self._print_stats()
            pygame.quit()

    def _init_pygame(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode(self.controller.bounds)
        pygame.display.set_caption(self.title)
        self.clock = pygame.time.Clock()

    def _handle_events(self) -> None:
        height = self.screen.get_height()
        for event in pygame.event.get():
            if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE):
                self.running = False
                continue
            message = translate_event(event, height, self.dpi_scale)
            if message is None:
                continue
            request = self.input.handle(message)
            if request is not None:
                self.controller.submit(request)

    def _render_if_needed(self) -> None:
        if not self.needs_render:
            return

        snapshot = self.controller.snapshot()
        t0 = time.perf_counter()
        self.renderer.render(self.buffer, self.controller.bounds, snapshot.viewport)
        render_ms = (time.perf_counter() - t0) * 1000

        surface = pygame.surfarray.make_surface(self.buffer.swapaxes(0, 1))
        self.screen.blit(surface, (0, 0))
        pygame.display.flip()
        pygame.display.set_caption(f"{self.title} | {render_ms:.1f}ms | zoom: {snapshot.zoom_level}")

        self.frame_times.append(render_ms)
        self.needs_render = False

    def _print_stats(self) -> None:
        if self.frame_times:
            avg_ms = sum(self.frame_times) / len(self.frame_times)
            print(f"\nRendered {len(self.frame_times)} frames")
            print(f"Average frame time: {avg_ms:.1f}ms")
