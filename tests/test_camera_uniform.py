import glm
import numpy as np
import pytest

from camera import CAMERA_UNIFORM_DTYPE, Camera, CameraUniform, clip_conversion_matrix, matrix_to_array
from orbit_camera import OrbitCamera


def test_uniform_layout_is_80_bytes():
    assert CAMERA_UNIFORM_DTYPE.itemsize == 80
    assert CAMERA_UNIFORM_DTYPE.fields['view_position'][1] == 0
    assert CAMERA_UNIFORM_DTYPE.fields['view_proj'][1] == 16

    uniform = CameraUniform()
    assert uniform.nbytes == 80
    assert len(uniform.tobytes()) == 80


def test_default_uniform_is_identity():
    uniform = CameraUniform()
    np.testing.assert_array_equal(uniform.view_position, np.zeros(4, dtype='f4'))
    np.testing.assert_array_equal(uniform.view_proj, np.identity(4, dtype='f4'))


def test_update_writes_eye_and_matrix():
    camera = OrbitCamera(2.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.5)
    uniform = CameraUniform()
    uniform.update_view_proj(camera)

    np.testing.assert_allclose(uniform.view_position, [0.0, 0.0, 2.0, 1.0], atol=1e-6)
    expected = np.array(matrix_to_array(camera.build_view_projection_matrix()), dtype='f4')
    np.testing.assert_array_equal(uniform.view_proj, expected)


def test_update_rewrites_buffer_in_place():
    camera = OrbitCamera(2.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.5)
    uniform = CameraUniform()
    buffer = uniform.data

    uniform.update_view_proj(camera)
    camera.add_yaw(0.5)
    camera.add_distance(1.0)
    uniform.update_view_proj(camera)

    assert uniform.data is buffer
    eye = camera.eye
    np.testing.assert_allclose(uniform.view_position, [eye.x, eye.y, eye.z, 1.0], atol=1e-6)


def test_matrix_to_array_is_column_major():
    m = glm.translate(glm.mat4(1.0), glm.vec3(1.0, 2.0, 3.0))
    columns = matrix_to_array(m)
    assert columns[3] == [1.0, 2.0, 3.0, 1.0]
    assert columns[0] == [1.0, 0.0, 0.0, 0.0]


def test_clip_conversion_is_a_copy():
    m = clip_conversion_matrix("opengl")
    m[0][0] = 5.0
    assert clip_conversion_matrix("opengl") == glm.mat4(1.0)


def test_camera_base_requires_override():
    with pytest.raises(NotImplementedError):
        Camera().build_view_projection_matrix()


def test_orbit_camera_is_a_camera():
    assert isinstance(OrbitCamera(1.0, 0.0, 0.0, (0.0, 0.0, 0.0), 1.0), Camera)
