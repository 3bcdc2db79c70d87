import numpy as np
import pygame
import pytest

from fractalzoom import (
    Button,
    ButtonPressed,
    ButtonReleased,
    FrameRenderer,
    InputHandler,
    PointerMoved,
    ZoomController,
    ZoomRequest,
    build_color_table,
    pixel_to_point,
)
from fractalzoom.viewer import Explorer, translate_event

from conftest import gray_gradient


def test_pointer_position_is_flipped_to_plane_orientation():
    event = pygame.event.Event(pygame.MOUSEMOTION, pos=(10, 30))
    assert translate_event(event, 100) == PointerMoved(10, 70)


def test_pointer_position_is_dpi_scaled():
    event = pygame.event.Event(pygame.MOUSEMOTION, pos=(10, 30))
    assert translate_event(event, 100, dpi_scale=2.0) == PointerMoved(20, 40)


def test_scaled_pointer_zooms_onto_point_under_it(unit_viewport):
    # 800x800 device canvas shown in a 400x400 window; the pointer sits
    # 20 device pixels above the bottom edge.
    bounds = (800, 800)
    message = translate_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(10, 390)), 800, dpi_scale=2.0)
    assert message == PointerMoved(20, 20)

    handler = InputHandler()
    handler.handle(message)
    request = handler.handle(ButtonPressed(Button.LEFT))
    controller = ZoomController(unit_viewport, 2.0, bounds)
    controller.submit(request)
    controller.apply_pending()

    target = pixel_to_point(bounds, (20, 780), unit_viewport)
    center = controller.snapshot().viewport.center
    assert center.real == pytest.approx(target.real)
    assert center.imag == pytest.approx(target.imag)


@pytest.mark.parametrize(
    "event_type, button, expected",
    [
        (pygame.MOUSEBUTTONDOWN, 1, ButtonPressed(Button.LEFT)),
        (pygame.MOUSEBUTTONUP, 1, ButtonReleased(Button.LEFT)),
        (pygame.MOUSEBUTTONDOWN, 3, ButtonPressed(Button.RIGHT)),
        (pygame.MOUSEBUTTONDOWN, 2, ButtonPressed(Button.MIDDLE)),
        (pygame.MOUSEBUTTONDOWN, 4, None),
    ],
)
def test_button_events(event_type, button, expected):
    event = pygame.event.Event(event_type, button=button, pos=(0, 0))
    assert translate_event(event, 100) == expected


def test_unrelated_events_are_ignored():
    event = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a)
    assert translate_event(event, 100) is None


def test_translated_click_produces_zoom_request():
    handler = InputHandler()
    events = [
        pygame.event.Event(pygame.MOUSEMOTION, pos=(600, 200)),
        pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(600, 200)),
        pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(600, 200)),
    ]
    requests = [handler.handle(translate_event(event, 800)) for event in events]
    assert requests == [None, ZoomRequest(600, 600), None]


@pytest.fixture
def headless_display(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    yield
    pygame.quit()


def test_explorer_zooms_between_frames(headless_display, unit_viewport):
    controller = ZoomController(unit_viewport, 2.0, (32, 32))
    table = build_color_table(20, gray_gradient)

    with FrameRenderer(table, 20, band_height=8, workers=2) as renderer:
        explorer = Explorer(controller, renderer)
        explorer._init_pygame()

        explorer._render_if_needed()
        first_frame = explorer.buffer.copy()
        assert explorer.frame_times and not explorer.needs_render

        pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(24, 8), rel=(0, 0), buttons=(0, 0, 0)))
        pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(24, 8)))
        explorer._handle_events()

        assert controller.snapshot().zoom_level == 0
        assert controller.apply_pending() is True
        assert controller.snapshot().zoom_level == 1

        explorer.needs_render = True
        explorer._render_if_needed()
        assert not np.array_equal(first_frame, explorer.buffer)


def test_explorer_stops_on_quit(headless_display, unit_viewport):
    controller = ZoomController(unit_viewport, 2.0, (16, 16))
    table = build_color_table(10, gray_gradient)

    with FrameRenderer(table, 10) as renderer:
        explorer = Explorer(controller, renderer)
        explorer._init_pygame()
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        explorer._handle_events()

    assert explorer.running is False
