import glm
import numpy as np

# glm builds clip space with depth in [-1, 1]. Backends using [0, 1]
# (Vulkan, Metal, D3D, wgpu) need depth remapped: z' = 0.5 * z + 0.5 * w
OPENGL_TO_ZERO_TO_ONE = glm.mat4(
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 0.5, 0.0,
    0.0, 0.0, 0.5, 1.0,
)

CLIP_CONVERSIONS = {
    "opengl": glm.mat4(1.0),
    "zero_to_one": OPENGL_TO_ZERO_TO_ONE,
}

# std140 compatible: vec4 followed by a column-major mat4, 80 bytes
CAMERA_UNIFORM_DTYPE = np.dtype([
    ('view_position', '<f4', (4,)),
    ('view_proj', '<f4', (4, 4)),
])


def clip_conversion_matrix(clip_space):
    try:
        return glm.mat4(CLIP_CONVERSIONS[clip_space])
    except KeyError:
        raise ValueError(
            f"Unknown clip space {clip_space!r}, expected one of {sorted(CLIP_CONVERSIONS)}"
        ) from None


def matrix_to_array(matrix):
    """Copy a glm.mat4 into nested lists, result[i] being column i."""
    return [[matrix[i][j] for j in range(4)] for i in range(4)]


class Camera:
    """Anything that can produce a view-projection matrix for the renderer."""

    def build_view_projection_matrix(self):
        raise NotImplementedError


class CameraUniform:
    """
    Per-frame camera data handed to the renderer as a uniform block.

    The record is allocated once and rewritten in place by
    ``update_view_proj``; ``data`` can be passed straight to a buffer upload.
    """

    def __init__(self):
        self.data = np.zeros(1, dtype=CAMERA_UNIFORM_DTYPE)
        self.data['view_proj'][0] = np.identity(4, dtype='f4')

    @property
    def view_position(self):
        return self.data['view_position'][0]

    @property
    def view_proj(self):
        return self.data['view_proj'][0]

    @property
    def nbytes(self):
        return self.data.nbytes

    def update_view_proj(self, camera):
        eye = camera.eye
        self.data['view_position'][0] = (eye.x, eye.y, eye.z, 1.0)
        self.data['view_proj'][0] = matrix_to_array(camera.build_view_projection_matrix())

    def tobytes(self):
        return self.data.tobytes()
