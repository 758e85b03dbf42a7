"""Raw input records passed from the window layer to the camera controller."""
from dataclasses import dataclass

# GLFW codes, so the window layer can forward them untouched
MOUSE_BUTTON_LEFT = 0
MOUSE_BUTTON_RIGHT = 1
KEY_LEFT_SHIFT = 340


@dataclass(frozen=True)
class ButtonEvent:
    button: int
    pressed: bool


@dataclass(frozen=True)
class MotionEvent:
    dx: float
    dy: float


@dataclass(frozen=True)
class ScrollEvent:
    amount: float


@dataclass(frozen=True)
class KeyEvent:
    key: int
    pressed: bool
    repeat: bool = False
