import logging

from input_events import (
    KEY_LEFT_SHIFT,
    MOUSE_BUTTON_LEFT,
    ButtonEvent,
    KeyEvent,
    MotionEvent,
    ScrollEvent,
)

logger = logging.getLogger(__name__)


class CameraController:
    """
    Turns raw input into orbit camera moves.

    Dragging with the primary button rotates, holding the pan key pans and
    scrolling zooms. The pan key always wins: pressing it ends a rotate drag,
    and while it is held the primary button does not change the mode.
    """

    def __init__(self, rotate_speed=0.0025, zoom_speed=0.1,
                 primary_button=MOUSE_BUTTON_LEFT, pan_key=KEY_LEFT_SHIFT):
        self.rotate_speed = rotate_speed
        self.zoom_speed = zoom_speed
        self.primary_button = primary_button
        self.pan_key = pan_key
        self.is_drag_rotate = False
        self.is_pan = False

    @property
    def mode(self):
        if self.is_pan:
            return "panning"
        if self.is_drag_rotate:
            return "rotating"
        return "idle"

    def process_device_event(self, event, camera):
        """Apply one event to ``camera``. Returns True if a redraw is needed."""
        if isinstance(event, ButtonEvent):
            if event.button == self.primary_button and not self.is_pan:
                self.is_drag_rotate = event.pressed
                logger.debug("Camera mode: %s", self.mode)
            return False

        if isinstance(event, ScrollEvent):
            camera.add_distance(-event.amount * self.zoom_speed)
            return True

        if isinstance(event, MotionEvent):
            if self.is_pan:
                camera.pan((event.dx * self.rotate_speed, event.dy * self.rotate_speed))
                return True
            if self.is_drag_rotate:
                camera.add_yaw(-event.dx * self.rotate_speed)
                camera.add_pitch(event.dy * self.rotate_speed)
                return True
            return False

        return False

    def process_key_event(self, event):
        if isinstance(event, KeyEvent) and event.key == self.pan_key:
            self.is_pan = event.pressed
            if event.pressed:
                self.is_drag_rotate = False
            logger.debug("Camera mode: %s", self.mode)
