import numpy as np

from lights import LIGHT_UNIFORM_DTYPE, LightUniform


def test_light_layout_matches_std140():
    assert LIGHT_UNIFORM_DTYPE.itemsize == 32
    assert LIGHT_UNIFORM_DTYPE.fields['position'][1] == 0
    assert LIGHT_UNIFORM_DTYPE.fields['color'][1] == 16


def test_default_light():
    light = LightUniform()
    np.testing.assert_array_equal(light.position, [2.0, 2.0, 2.0])
    np.testing.assert_array_equal(light.color, [1.0, 1.0, 1.0])
    assert len(light.tobytes()) == 32


def test_set_updates_only_given_fields():
    light = LightUniform()
    light.set(color=(0.5, 0.25, 0.0))
    np.testing.assert_array_equal(light.position, [2.0, 2.0, 2.0])
    np.testing.assert_array_equal(light.color, [0.5, 0.25, 0.0])
