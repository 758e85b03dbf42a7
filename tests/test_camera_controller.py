import pytest

from camera_controller import CameraController
from input_events import (
    KEY_LEFT_SHIFT,
    MOUSE_BUTTON_LEFT,
    MOUSE_BUTTON_RIGHT,
    ButtonEvent,
    KeyEvent,
    MotionEvent,
    ScrollEvent,
)
from orbit_camera import OrbitCamera, OrbitCameraBounds


@pytest.fixture
def camera():
    return OrbitCamera(2.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.5, bounds=OrbitCameraBounds(min_distance=1.1))


@pytest.fixture
def controller():
    return CameraController(rotate_speed=0.0025, zoom_speed=0.1)


def _press(button=MOUSE_BUTTON_LEFT):
    return ButtonEvent(button, True)


def _release(button=MOUSE_BUTTON_LEFT):
    return ButtonEvent(button, False)


def test_starts_idle(controller):
    assert not controller.is_drag_rotate
    assert not controller.is_pan
    assert controller.mode == "idle"


def test_drag_rotates(controller, camera):
    """Press then move (10, 0): yaw drops by 10 * rotate_speed, pitch untouched"""
    yaw_before = camera.yaw
    controller.process_device_event(_press(), camera)
    redraw = controller.process_device_event(MotionEvent(10.0, 0.0), camera)

    assert redraw
    assert controller.mode == "rotating"
    assert camera.yaw == pytest.approx(yaw_before - 10.0 * 0.0025)
    assert camera.pitch == 0.0


def test_vertical_drag_changes_pitch(controller, camera):
    controller.process_device_event(_press(), camera)
    controller.process_device_event(MotionEvent(0.0, 40.0), camera)
    assert camera.pitch == pytest.approx(40.0 * 0.0025)
    assert camera.yaw == 0.0


def test_release_ends_drag(controller, camera):
    controller.process_device_event(_press(), camera)
    controller.process_device_event(_release(), camera)
    redraw = controller.process_device_event(MotionEvent(10.0, 10.0), camera)

    assert not redraw
    assert controller.mode == "idle"
    assert camera.yaw == 0.0
    assert camera.pitch == 0.0


def test_idle_motion_is_ignored(controller, camera):
    eye_before = camera.eye
    assert not controller.process_device_event(MotionEvent(25.0, -8.0), camera)
    assert camera.eye == eye_before


def test_pan_key_then_button_pans(controller, camera):
    """Modifier, then button, then a zero move: panning, target unchanged"""
    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, True))
    controller.process_device_event(_press(), camera)
    controller.process_device_event(MotionEvent(0.0, 0.0), camera)

    assert controller.is_pan
    assert not controller.is_drag_rotate
    assert tuple(camera.target) == (0.0, 0.0, 0.0)


def test_pan_moves_target(controller, camera):
    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, True))
    redraw = controller.process_device_event(MotionEvent(100.0, 0.0), camera)

    assert redraw
    assert camera.target.x == pytest.approx(-100.0 * 0.0025, abs=1e-6)
    assert camera.yaw == 0.0


def test_button_release_does_not_end_pan(controller, camera):
    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, True))
    controller.process_device_event(_press(), camera)
    controller.process_device_event(_release(), camera)

    assert controller.is_pan
    assert not controller.is_drag_rotate


def test_pan_key_interrupts_rotate(controller, camera):
    controller.process_device_event(_press(), camera)
    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, True))

    assert controller.mode == "panning"
    assert not controller.is_drag_rotate

    controller.process_device_event(MotionEvent(10.0, 0.0), camera)
    assert camera.yaw == 0.0


def test_pan_key_release_returns_to_idle(controller, camera):
    controller.process_device_event(_press(), camera)
    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, True))
    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, False))

    assert controller.mode == "idle"
    assert not controller.process_device_event(MotionEvent(10.0, 0.0), camera)


def test_flags_never_both_set(controller, camera):
    events = [
        _press(),
        KeyEvent(KEY_LEFT_SHIFT, True),
        _release(),
        _press(),
        KeyEvent(KEY_LEFT_SHIFT, False),
        _press(),
        KeyEvent(KEY_LEFT_SHIFT, True),
        _release(),
    ]
    for event in events:
        if isinstance(event, KeyEvent):
            controller.process_key_event(event)
        else:
            controller.process_device_event(event, camera)
        assert not (controller.is_pan and controller.is_drag_rotate)


def test_scroll_zooms(controller):
    camera = OrbitCamera(5.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.0)
    redraw = controller.process_device_event(ScrollEvent(3.0), camera)

    assert redraw
    assert camera.distance == pytest.approx(5.0 - 0.3)


def test_scroll_back_zooms_out(controller):
    camera = OrbitCamera(5.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.0)
    controller.process_device_event(ScrollEvent(-2.0), camera)
    assert camera.distance == pytest.approx(5.2)


def test_scroll_is_clamped(controller, camera):
    controller.process_device_event(ScrollEvent(100.0), camera)
    assert camera.distance == 1.1


def test_other_buttons_are_ignored(controller, camera):
    controller.process_device_event(_press(MOUSE_BUTTON_RIGHT), camera)
    assert controller.mode == "idle"


def test_button_events_do_not_request_redraw(controller, camera):
    assert not controller.process_device_event(_press(), camera)
    assert not controller.process_device_event(_release(), camera)


def test_unknown_events_are_ignored(controller, camera):
    assert not controller.process_device_event(object(), camera)
    controller.process_key_event(object())
    assert controller.mode == "idle"


def test_other_keys_are_ignored(controller):
    controller.process_key_event(KeyEvent(65, True))
    assert not controller.is_pan


def test_custom_bindings():
    controller = CameraController(primary_button=MOUSE_BUTTON_RIGHT, pan_key=341)
    camera = OrbitCamera(2.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.0)

    controller.process_device_event(_press(MOUSE_BUTTON_LEFT), camera)
    assert controller.mode == "idle"
    controller.process_device_event(_press(MOUSE_BUTTON_RIGHT), camera)
    assert controller.mode == "rotating"

    controller.process_key_event(KeyEvent(KEY_LEFT_SHIFT, True))
    assert controller.mode == "rotating"
    controller.process_key_event(KeyEvent(341, True))
    assert controller.mode == "panning"
