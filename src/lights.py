import numpy as np

# vec3 + pad, vec3 + pad (std140 rounds each vec3 up to 16 bytes)
LIGHT_UNIFORM_DTYPE = np.dtype([
    ('position', '<f4', (3,)),
    ('_padding', '<u4'),
    ('color', '<f4', (3,)),
    ('_padding2', '<u4'),
])


class LightUniform:
    def __init__(self, position=(2.0, 2.0, 2.0), color=(1.0, 1.0, 1.0)):
        self.data = np.zeros(1, dtype=LIGHT_UNIFORM_DTYPE)
        self.set(position, color)

    @property
    def position(self):
        return self.data['position'][0]

    @property
    def color(self):
        return self.data['color'][0]

    @property
    def nbytes(self):
        return self.data.nbytes

    def set(self, position=None, color=None):
        if position is not None:
            self.data['position'][0] = position
        if color is not None:
            self.data['color'][0] = color

    def tobytes(self):
        return self.data.tobytes()
