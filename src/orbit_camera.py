import logging
import math

import glm

from camera import Camera, clip_conversion_matrix

logger = logging.getLogger(__name__)

WORLD_UP = glm.vec3(0.0, 1.0, 0.0)

# Keeps the look-at up vector from degenerating at the poles
PITCH_SAFETY_MARGIN = 0.01
MAX_SAFE_PITCH = math.pi / 2 - PITCH_SAFETY_MARGIN
MIN_SAFE_PITCH = -MAX_SAFE_PITCH

# Implicit floor when no min_distance is configured
MIN_DISTANCE_EPSILON = 1e-4


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


class OrbitCameraBounds:
    """Optional limits for the orbit; None leaves that side unconstrained."""

    def __init__(self, min_distance=None, max_distance=None, min_pitch=None, max_pitch=None):
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.min_pitch = min_pitch
        self.max_pitch = max_pitch

    def distance_range(self):
        lo = MIN_DISTANCE_EPSILON
        if self.min_distance is not None:
            lo = max(lo, self.min_distance)
        hi = math.inf if self.max_distance is None else self.max_distance
        return lo, max(lo, hi)

    def pitch_range(self):
        lo = MIN_SAFE_PITCH if self.min_pitch is None else _clamp(self.min_pitch, MIN_SAFE_PITCH, MAX_SAFE_PITCH)
        hi = MAX_SAFE_PITCH if self.max_pitch is None else _clamp(self.max_pitch, MIN_SAFE_PITCH, MAX_SAFE_PITCH)
        return lo, max(lo, hi)

    def __repr__(self):
        return (f"OrbitCameraBounds(min_distance={self.min_distance}, max_distance={self.max_distance}, "
                f"min_pitch={self.min_pitch}, max_pitch={self.max_pitch})")


class OrbitState:
    """Spherical viewpoint around a target. Plain data, mutated only by OrbitCamera."""

    def __init__(self, distance, pitch, yaw, target, bounds):
        self.distance = distance
        self.pitch = pitch
        self.yaw = yaw
        self.target = target
        self.bounds = bounds

    def offset(self):
        # pitch=0 lies in the XZ plane, yaw=0 looks down -Z from +Z
        r = self.distance * math.cos(self.pitch)
        return glm.vec3(
            r * math.sin(self.yaw),
            self.distance * math.sin(self.pitch),
            r * math.cos(self.yaw),
        )


class OrbitCamera(Camera):
    """
    Camera orbiting a target point on a sphere.

    All mutation goes through the methods below so the bounds in
    ``self.bounds`` hold after every call. Bounds may be edited directly;
    they are applied on the next mutation.
    """

    def __init__(self, distance, pitch, yaw, target, aspect,
                 fovy=45.0, znear=0.1, zfar=100.0, bounds=None, clip_space="opengl"):
        if distance <= 0:
            raise ValueError(f"distance must be > 0, got {distance}")
        if aspect <= 0:
            raise ValueError(f"aspect must be > 0, got {aspect}")
        if not 0 < znear < zfar:
            raise ValueError(f"expected 0 < znear < zfar, got znear={znear}, zfar={zfar}")

        self._state = OrbitState(
            distance=float(distance),
            pitch=float(pitch),
            yaw=0.0,
            target=glm.vec3(target),
            bounds=bounds if bounds is not None else OrbitCameraBounds(),
        )
        self.aspect = float(aspect)
        self.fovy = float(fovy)
        self.znear = float(znear)
        self.zfar = float(zfar)
        self.clip_space = clip_space
        self._clip_conversion = clip_conversion_matrix(clip_space)

        self.set_distance(distance)
        self.set_pitch(pitch)
        self.set_yaw(yaw)

    # Read-only views of the state

    @property
    def distance(self):
        return self._state.distance

    @property
    def pitch(self):
        return self._state.pitch

    @property
    def yaw(self):
        return self._state.yaw

    @property
    def target(self):
        return glm.vec3(self._state.target)

    @property
    def bounds(self):
        return self._state.bounds

    @property
    def eye(self):
        return self._state.target + self._state.offset()

    # Mutators

    def set_distance(self, distance):
        lo, hi = self._state.bounds.distance_range()
        self._state.distance = _clamp(distance, lo, hi)

    def add_distance(self, delta):
        self.set_distance(self._state.distance + delta)

    def set_pitch(self, pitch):
        lo, hi = self._state.bounds.pitch_range()
        self._state.pitch = _clamp(pitch, lo, hi)

    def add_pitch(self, delta):
        self.set_pitch(self._state.pitch + delta)

    def set_yaw(self, yaw):
        # Only for precision; remainder keeps the sign of small angles.
        self._state.yaw = math.remainder(yaw, math.tau)

    def add_yaw(self, delta):
        self.set_yaw(self._state.yaw + delta)

    def set_target(self, target):
        self._state.target = glm.vec3(target)

    def pan(self, delta):
        dx, dy = delta
        state = self._state
        forward = glm.normalize(-state.offset())
        right = glm.normalize(glm.cross(forward, WORLD_UP))
        up = glm.cross(right, forward)

        # Screen y grows downward
        state.target = state.target - right * dx + up * dy

    def resize_projection(self, width, height):
        if width <= 0 or height <= 0:
            logger.debug("Ignoring resize to %sx%s, keeping aspect %.4f", width, height, self.aspect)
            return
        self.aspect = width / height

    # Queries

    def build_view_matrix(self):
        return glm.lookAtRH(self.eye, self._state.target, WORLD_UP)

    def build_projection_matrix(self):
        return glm.perspectiveRH_NO(glm.radians(self.fovy), self.aspect, self.znear, self.zfar)

    def build_view_projection_matrix(self):
        return self._clip_conversion * self.build_projection_matrix() * self.build_view_matrix()

    def __repr__(self):
        return (f"OrbitCamera(distance={self.distance:.3f}, pitch={self.pitch:.3f}, "
                f"yaw={self.yaw:.3f}, target={tuple(self._state.target)})")
