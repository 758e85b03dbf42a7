import argparse
import logging
import sys
import time

import glfw
import OpenGL.GL as gl
import imgui
from imgui.integrations.glfw import GlfwRenderer

from camera import CameraUniform
from camera_controller import CameraController
from config import load_config
from input_events import ButtonEvent, KeyEvent, MotionEvent, ScrollEvent
from lights import LightUniform
from logging_setup import setup_logging
from orbit_camera import OrbitCamera, OrbitCameraBounds
from renderer import Renderer

logger = logging.getLogger(__name__)


def create_camera(camera_config, width, height):
    b = camera_config.bounds
    bounds = OrbitCameraBounds(
        min_distance=b.min_distance,
        max_distance=b.max_distance,
        min_pitch=b.min_pitch,
        max_pitch=b.max_pitch,
    )
    return OrbitCamera(
        camera_config.distance,
        camera_config.pitch,
        camera_config.yaw,
        camera_config.target,
        width / max(1, height),
        fovy=camera_config.fovy,
        znear=camera_config.znear,
        zfar=camera_config.zfar,
        bounds=bounds,
        clip_space=camera_config.clip_space,
    )


class App:
    """
    Owns the window, the camera and the controller, and drives the frame loop.

    GLFW callbacks only feed events to the controller and set
    ``redraw_requested``; the camera uniform is rebuilt once per frame after
    all pending events have been applied.
    """

    def __init__(self, config):
        self.config = config
        win = config.window

        if not glfw.init():
            logger.error("Failed to initialise GLFW")
            sys.exit(1)

        # Core Profile 3.3
        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, gl.GL_TRUE)

        self.window = glfw.create_window(win.width, win.height, win.title, None, None)
        if not self.window:
            logger.error("Failed to create a %dx%d window", win.width, win.height)
            glfw.terminate()
            sys.exit(1)

        glfw.make_context_current(self.window)
        logger.info("OpenGL %s", gl.glGetString(gl.GL_VERSION).decode(errors="replace"))

        # ImGui Setup
        self.impl = None
        if win.show_overlay:
            imgui.create_context()
            self.impl = GlfwRenderer(self.window, attach_callbacks=False)

        # Callbacks
        glfw.set_mouse_button_callback(self.window, self.mouse_button_callback)
        glfw.set_cursor_pos_callback(self.window, self.cursor_pos_callback)
        glfw.set_scroll_callback(self.window, self.scroll_callback)
        glfw.set_key_callback(self.window, self.key_callback)
        glfw.set_char_callback(self.window, self.char_callback)
        glfw.set_framebuffer_size_callback(self.window, self.resize_callback)

        # Systems
        fb_width, fb_height = glfw.get_framebuffer_size(self.window)
        self.renderer = Renderer()
        self.renderer.resize(fb_width, fb_height)
        self.camera = create_camera(config.camera, fb_width, fb_height)
        self.controller = CameraController(
            rotate_speed=config.controller.rotate_speed,
            zoom_speed=config.controller.zoom_speed,
        )
        self.camera_uniform = CameraUniform()
        self.camera_uniform.update_view_proj(self.camera)
        self.renderer.upload_camera(self.camera_uniform)

        self.light_uniform = LightUniform(config.light.position, config.light.color)
        self.renderer.upload_light(self.light_uniform)

        # State
        self.debug = False
        self.redraw_requested = True
        self.frame_ms = 0.0

        # Mouse state
        self.last_mouse_x, self.last_mouse_y = glfw.get_cursor_pos(self.window)

        logger.info("Camera: %r", self.camera)

    def _ui_wants_mouse(self):
        return self.impl is not None and imgui.get_io().want_capture_mouse

    def _ui_wants_keyboard(self):
        return self.impl is not None and imgui.get_io().want_capture_keyboard

    def _device_event(self, event):
        if self.controller.process_device_event(event, self.camera):
            self.redraw_requested = True

    def run(self):
        while not glfw.window_should_close(self.window):
            if self.redraw_requested or self.impl is not None:
                glfw.poll_events()
            else:
                glfw.wait_events()

            # The overlay needs a frame every tick, the scene alone only on request
            if not self.redraw_requested and self.impl is None:
                continue

            if self.impl is not None:
                self.impl.process_inputs()

            # All input for this tick is applied, now rebuild the uniform
            t0 = time.perf_counter()
            self.update()
            self.render()
            glfw.swap_buffers(self.window)
            self.frame_ms = (time.perf_counter() - t0) * 1000.0
            self.redraw_requested = False
            logger.debug("Frame %.2f ms", self.frame_ms)

        if self.impl is not None:
            self.impl.shutdown()
        glfw.terminate()

    def update(self):
        self.camera_uniform.update_view_proj(self.camera)
        self.renderer.upload_camera(self.camera_uniform)

    def render(self):
        self.renderer.render(debug=self.debug)

        if self.impl is not None:
            imgui.new_frame()
            self.draw_ui()
            imgui.render()
            self.impl.render(imgui.get_draw_data())

    def draw_ui(self):
        imgui.begin("Camera")
        imgui.text("Frame: %.2f ms" % self.frame_ms)
        imgui.text("Mode: %s" % self.controller.mode)
        imgui.separator()
        imgui.text("Distance: %.3f" % self.camera.distance)
        imgui.text("Pitch: %.3f rad" % self.camera.pitch)
        imgui.text("Yaw: %.3f rad" % self.camera.yaw)
        t = self.camera.target
        imgui.text("Target: (%.2f, %.2f, %.2f)" % (t.x, t.y, t.z))
        changed, debug = imgui.checkbox("Debug (J)", self.debug)
        if changed:
            self.set_debug(debug)
        imgui.end()

    def set_debug(self, debug):
        self.debug = debug
        logger.info("Debug: %s", debug)
        self.redraw_requested = True

    # GLFW callbacks

    def mouse_button_callback(self, window, button, action, mods):
        if action not in (glfw.PRESS, glfw.RELEASE):
            return
        pressed = action == glfw.PRESS
        # Releases always reach the controller so a drag can't get stuck
        if pressed and self._ui_wants_mouse():
            return
        self._device_event(ButtonEvent(button, pressed))

    def cursor_pos_callback(self, window, x, y):
        dx = x - self.last_mouse_x
        dy = y - self.last_mouse_y
        self.last_mouse_x = x
        self.last_mouse_y = y
        if self._ui_wants_mouse():
            return
        self._device_event(MotionEvent(dx, dy))

    def scroll_callback(self, window, x_offset, y_offset):
        if self.impl is not None:
            self.impl.scroll_callback(window, x_offset, y_offset)
        if self._ui_wants_mouse():
            return
        self._device_event(ScrollEvent(y_offset))

    def key_callback(self, window, key, scancode, action, mods):
        if self.impl is not None:
            self.impl.keyboard_callback(window, key, scancode, action, mods)

        if key == glfw.KEY_ESCAPE and action == glfw.PRESS:
            glfw.set_window_should_close(window, True)
            return
        if action == glfw.REPEAT:
            return
        pressed = action == glfw.PRESS

        if pressed and self._ui_wants_keyboard():
            return
        if key == glfw.KEY_J and pressed:
            self.set_debug(not self.debug)
            return
        self.controller.process_key_event(KeyEvent(key, pressed))

    def char_callback(self, window, char):
        if self.impl is not None:
            self.impl.char_callback(window, char)

    def resize_callback(self, window, width, height):
        if self.impl is not None:
            self.impl.resize_callback(window, width, height)
        logger.debug("Resize to %dx%d", width, height)
        self.renderer.resize(width, height)
        self.camera.resize_projection(width, height)
        self.redraw_requested = True


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Orbit camera viewer")
    parser.add_argument("--config", help="JSON settings file layered over the defaults")
    parser.add_argument("--strict-config", action="store_true",
                        help="fail instead of falling back to defaults on a bad config file")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", help="also write logs to this rotating file")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file)
    config = load_config(args.config, strict=args.strict_config)
    app = App(config)
    app.run()


if __name__ == "__main__":
    main()
