import math
import sys

import cairo
import pytest


@pytest.fixture
def surface():
    return cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)


def local_frame(cx, cy, angle):
    """The matrix of a frame centered on (cx, cy), rotated by `angle`."""
    c, s = math.cos(angle), math.sin(angle)
    return (c, s, -s, c, cx, cy)


def matrix(cr):
    m = cr.get_matrix()
    return (m.xx, m.yx, m.xy, m.yy, m.x0, m.y0)


def pixels(surface):
    surface.flush()
    return bytes(surface.get_data())


def pixel(surface, x, y):
    """The (a, r, g, b) bytes of the pixel at (x, y)."""
    data = pixels(surface)
    offset = y * surface.get_stride() + 4 * x
    argb = int.from_bytes(data[offset:offset + 4], sys.byteorder)
    return ((argb >> 24) & 0xFF, (argb >> 16) & 0xFF,
            (argb >> 8) & 0xFF, argb & 0xFF)


def ink(surface, keep=lambda x, y: True):
    """The (x, y) of every visible pixel for which `keep` holds."""
    data = pixels(surface)
    stride = surface.get_stride()
    found = []
    for y in range(surface.get_height()):
        for x in range(surface.get_width()):
            offset = y * stride + 4 * x
            if any(data[offset:offset + 4]) and keep(x, y):
                found.append((x, y))
    return found
