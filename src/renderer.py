import ctypes
import logging

import OpenGL.GL as gl
import numpy as np
import glm
from OpenGL.GL import shaders

from camera import CAMERA_UNIFORM_DTYPE
from lights import LIGHT_UNIFORM_DTYPE

logger = logging.getLogger(__name__)

CAMERA_BINDING = 0
LIGHT_BINDING = 1

# Built-in pentagon: position, color
MESH_VERTICES = np.array([
    [-0.0868241, 0.49240386, 0.1,   0.5, 0.0, 0.5],  # A
    [-0.49513406, 0.06958647, 0.0,  0.5, 0.0, 0.5],  # B
    [-0.21918549, -0.44939706, 0.0, 0.5, 0.0, 0.5],  # C
    [0.35966998, -0.3473291, 1.0,   0.5, 0.0, 0.5],  # D
    [0.44147372, 0.2347359, 0.0,    0.5, 0.0, 0.5],  # E
], dtype='f4')

MESH_INDICES = np.array([0, 1, 4, 1, 2, 4, 2, 3, 4], dtype='u2')

CAMERA_BLOCK = """
layout(std140) uniform Camera {
    vec4 view_position;
    mat4 view_proj;
};
"""

LIGHT_BLOCK = """
layout(std140) uniform Light {
    vec3 light_position;
    vec3 light_color;
};
"""


class Renderer:
    """OpenGL side of the viewer. Reads the camera only through its uniform block."""

    def __init__(self):
        self.camera_ubo = self._create_uniform_buffer(CAMERA_UNIFORM_DTYPE.itemsize, CAMERA_BINDING)
        self.light_ubo = self._create_uniform_buffer(LIGHT_UNIFORM_DTYPE.itemsize, LIGHT_BINDING)
        self.prog = self._create_program()
        self.flat_prog = self._create_flat_program()
        self._init_grid()
        self._init_mesh()
        self._init_marker()
        self.light_pos = glm.vec3(2.0, 2.0, 2.0)

    def _create_uniform_buffer(self, size, binding):
        ubo = gl.glGenBuffers(1)
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, ubo)
        gl.glBufferData(gl.GL_UNIFORM_BUFFER, size, None, gl.GL_DYNAMIC_DRAW)
        gl.glBindBufferBase(gl.GL_UNIFORM_BUFFER, binding, ubo)
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, 0)
        return ubo

    def _bind_block(self, prog, name, binding):
        index = gl.glGetUniformBlockIndex(prog, name)
        if index != gl.GL_INVALID_INDEX:
            gl.glUniformBlockBinding(prog, index, binding)

    def _create_program(self):
        vertex_shader = "#version 330\n" + CAMERA_BLOCK + """
        in vec3 in_position;
        in vec3 in_color;

        out vec3 v_frag_pos; // World space position
        out vec3 v_color;

        void main() {
            v_frag_pos = in_position;
            v_color = in_color;
            gl_Position = view_proj * vec4(in_position, 1.0);
        }
        """

        fragment_shader = "#version 330\n" + CAMERA_BLOCK + LIGHT_BLOCK + """
        in vec3 v_frag_pos;
        in vec3 v_color;

        out vec4 f_color;

        const float shininess = 32.0;

        void main() {
            // Flat normal from screen-space derivatives, the mesh has none
            vec3 norm = normalize(cross(dFdx(v_frag_pos), dFdy(v_frag_pos)));
            vec3 view_dir = normalize(view_position.xyz - v_frag_pos);
            if (dot(norm, view_dir) < 0.0) {
                norm = -norm;
            }
            vec3 light_dir = normalize(light_position - v_frag_pos);

            vec3 ambient = 0.1 * light_color;
            vec3 diffuse = max(dot(norm, light_dir), 0.0) * light_color;

            // Blinn-Phong
            vec3 halfway_dir = normalize(light_dir + view_dir);
            vec3 specular = pow(max(dot(norm, halfway_dir), 0.0), shininess) * light_color;

            f_color = vec4((ambient + diffuse + specular) * v_color, 1.0);
        }
        """

        vs = shaders.compileShader(vertex_shader, gl.GL_VERTEX_SHADER)
        fs = shaders.compileShader(fragment_shader, gl.GL_FRAGMENT_SHADER)
        prog = shaders.compileProgram(vs, fs)
        self._bind_block(prog, 'Camera', CAMERA_BINDING)
        self._bind_block(prog, 'Light', LIGHT_BINDING)
        return prog

    def _create_flat_program(self):
        # Grid, wireframe overlay and markers
        vs_src = "#version 330\n" + CAMERA_BLOCK + """
        in vec3 in_position;
        in vec4 in_color;
        out vec4 v_color;
        uniform mat4 m_model;
        void main() {
            gl_Position = view_proj * m_model * vec4(in_position, 1.0);
            v_color = in_color;
        }
        """
        fs_src = """
        #version 330
        in vec4 v_color;
        out vec4 f_color;
        uniform vec4 u_color;
        uniform float u_color_mix;
        void main() {
            f_color = mix(v_color, u_color, u_color_mix);
        }
        """

        vs = shaders.compileShader(vs_src, gl.GL_VERTEX_SHADER)
        fs = shaders.compileShader(fs_src, gl.GL_FRAGMENT_SHADER)
        prog = shaders.compileProgram(vs, fs)
        self._bind_block(prog, 'Camera', CAMERA_BINDING)
        return prog

    def _attribute(self, prog, name, data, size, stride=0, offset=0):
        vbo = gl.glGenBuffers(1)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, vbo)
        gl.glBufferData(gl.GL_ARRAY_BUFFER, data.nbytes, data, gl.GL_STATIC_DRAW)
        loc = gl.glGetAttribLocation(prog, name)
        if loc < 0:
            # Optimised out by the compiler
            return vbo
        gl.glEnableVertexAttribArray(loc)
        gl.glVertexAttribPointer(loc, size, gl.GL_FLOAT, False, stride,
                                 ctypes.c_void_p(offset) if offset else None)
        return vbo

    def _init_grid(self):
        half = 10
        step = 0.5
        size = half * step

        vertices = []
        colors = []

        # Grid lines (Grey)
        for n in range(-half, half + 1):
            i = n * step
            # X lines
            vertices.extend([-size, 0, i, size, 0, i])
            colors.extend([0.5, 0.5, 0.5, 1.0] * 2)
            # Z lines
            vertices.extend([i, 0, -size, i, 0, size])
            colors.extend([0.5, 0.5, 0.5, 1.0] * 2)

        # Axes (RGB)
        vertices.extend([0, 0, 0, 1, 0, 0])
        colors.extend([1, 0, 0, 1] * 2)
        vertices.extend([0, 0, 0, 0, 1, 0])
        colors.extend([0, 1, 0, 1] * 2)
        vertices.extend([0, 0, 0, 0, 0, 1])
        colors.extend([0, 0, 1, 1] * 2)

        vertices = np.array(vertices, dtype='f4')
        colors = np.array(colors, dtype='f4')

        self.grid_vao = gl.glGenVertexArrays(1)
        gl.glBindVertexArray(self.grid_vao)
        self._attribute(self.flat_prog, 'in_position', vertices, 3)
        self._attribute(self.flat_prog, 'in_color', colors, 4)
        gl.glBindVertexArray(0)
        self.grid_count = len(vertices) // 3

    def _init_mesh(self):
        stride = MESH_VERTICES.strides[0]

        # One VAO per program, same interleaved data
        self.mesh_vao = gl.glGenVertexArrays(1)
        gl.glBindVertexArray(self.mesh_vao)
        self._attribute(self.prog, 'in_position', MESH_VERTICES, 3, stride, 0)
        self._attribute(self.prog, 'in_color', MESH_VERTICES, 3, stride, 12)
        self.mesh_ebo = gl.glGenBuffers(1)
        gl.glBindBuffer(gl.GL_ELEMENT_ARRAY_BUFFER, self.mesh_ebo)
        gl.glBufferData(gl.GL_ELEMENT_ARRAY_BUFFER, MESH_INDICES.nbytes, MESH_INDICES, gl.GL_STATIC_DRAW)
        gl.glBindVertexArray(0)

        self.mesh_outline_vao = gl.glGenVertexArrays(1)
        gl.glBindVertexArray(self.mesh_outline_vao)
        self._attribute(self.flat_prog, 'in_position', MESH_VERTICES, 3, stride, 0)
        gl.glBindBuffer(gl.GL_ELEMENT_ARRAY_BUFFER, self.mesh_ebo)
        gl.glBindVertexArray(0)

        self.mesh_count = len(MESH_INDICES)

    def _init_marker(self):
        # Small cube marking the light
        size = 0.05
        # 8 corners
        v = [
            -size, -size, -size,
             size, -size, -size,
             size,  size, -size,
            -size,  size, -size,
            -size, -size,  size,
             size, -size,  size,
             size,  size,  size,
            -size,  size,  size,
        ]
        # Triangles
        indices = [
            0, 1, 2, 2, 3, 0, # Back
            4, 5, 6, 6, 7, 4, # Front
            0, 1, 5, 5, 4, 0, # Bottom
            2, 3, 7, 7, 6, 2, # Top
            0, 3, 7, 7, 4, 0, # Left
            1, 2, 6, 6, 5, 1, # Right
        ]

        verts = []
        for i in indices:
            idx = i * 3
            verts.extend([v[idx], v[idx+1], v[idx+2]])
        verts = np.array(verts, dtype='f4')

        self.marker_vao = gl.glGenVertexArrays(1)
        gl.glBindVertexArray(self.marker_vao)
        self._attribute(self.flat_prog, 'in_position', verts, 3)
        gl.glBindVertexArray(0)
        self.marker_count = len(verts) // 3

    def upload_camera(self, camera_uniform):
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, self.camera_ubo)
        gl.glBufferSubData(gl.GL_UNIFORM_BUFFER, 0, camera_uniform.nbytes, camera_uniform.data)
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, 0)

    def upload_light(self, light_uniform):
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, self.light_ubo)
        gl.glBufferSubData(gl.GL_UNIFORM_BUFFER, 0, light_uniform.nbytes, light_uniform.data)
        gl.glBindBuffer(gl.GL_UNIFORM_BUFFER, 0)
        self.light_pos = glm.vec3(*light_uniform.position.tolist())

    def resize(self, width, height):
        if width > 0 and height > 0:
            gl.glViewport(0, 0, width, height)

    def _set_flat_uniforms(self, model, color=(0, 0, 0, 0), color_mix=0.0):
        gl.glUniformMatrix4fv(gl.glGetUniformLocation(self.flat_prog, 'm_model'), 1, gl.GL_FALSE, glm.value_ptr(model))
        gl.glUniform4f(gl.glGetUniformLocation(self.flat_prog, 'u_color'), *color)
        gl.glUniform1f(gl.glGetUniformLocation(self.flat_prog, 'u_color_mix'), color_mix)

    def render(self, debug=False):
        gl.glClearColor(0.1, 0.2, 0.3, 1.0)
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glDisable(gl.GL_CULL_FACE)

        # Render Grid
        gl.glUseProgram(self.flat_prog)
        self._set_flat_uniforms(glm.mat4(1.0))
        gl.glBindVertexArray(self.grid_vao)
        gl.glDrawArrays(gl.GL_LINES, 0, self.grid_count)
        gl.glBindVertexArray(0)

        # Render Mesh
        gl.glUseProgram(self.prog)
        gl.glBindVertexArray(self.mesh_vao)
        gl.glDrawElements(gl.GL_TRIANGLES, self.mesh_count, gl.GL_UNSIGNED_SHORT, None)
        gl.glBindVertexArray(0)

        if debug:
            self._render_debug()

        gl.glUseProgram(0)

    def _render_debug(self):
        gl.glUseProgram(self.flat_prog)

        # Wireframe on top of the solid mesh
        self._set_flat_uniforms(glm.mat4(1.0), (1.0, 0.5, 0.0, 1.0), 1.0)  # Orange
        gl.glEnable(gl.GL_POLYGON_OFFSET_LINE)
        gl.glPolygonOffset(-1.0, -1.0)  # Move closer to camera
        gl.glPolygonMode(gl.GL_FRONT_AND_BACK, gl.GL_LINE)
        gl.glBindVertexArray(self.mesh_outline_vao)
        gl.glDrawElements(gl.GL_TRIANGLES, self.mesh_count, gl.GL_UNSIGNED_SHORT, None)
        gl.glBindVertexArray(0)
        gl.glPolygonMode(gl.GL_FRONT_AND_BACK, gl.GL_FILL)
        gl.glDisable(gl.GL_POLYGON_OFFSET_LINE)

        # Light gizmo
        self._set_flat_uniforms(glm.translate(glm.mat4(1.0), self.light_pos), (1.0, 1.0, 0.0, 1.0), 1.0)
        gl.glBindVertexArray(self.marker_vao)
        gl.glDrawArrays(gl.GL_TRIANGLES, 0, self.marker_count)
        gl.glBindVertexArray(0)
