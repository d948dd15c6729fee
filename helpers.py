# cairo-gauge: Discrete-value analog gauges for cairo.
#
# Copyright (C) 2020  Brandon Lewis
#
# This program is free software: you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public License
# as published by the Free Software Foundation, either version 3 of
# the License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this program.  If not, see
# <https://www.gnu.org/licenses/>.


import cairo
import gi
gi.require_version("Pango", "1.0")
gi.require_version("PangoCairo", "1.0")
gi.require_foreign("cairo")
from gi.repository import Pango
from gi.repository import PangoCairo
import logging
import math


log = logging.getLogger(__name__)


class Helper(object):

    """Wraps a cairo context in a higher-level API.

    New Primitives:
    - circle
    - polygon
    - center text
    - clear rect

    Transform Context Managers (so you cannot forget `restore()`):
    - save
    - rotated
    - translated

    Wrapper methods which take Point objects instead of x/y pairs:
    - move_to
    - line_to
    - arc
    """

    def __init__(self, cr):
        self.cr = cr

    def circle(self, center, radius):
        self.cr.new_sub_path()
        self.cr.arc(center.x, center.y, radius, 0, 2 * math.pi)

    def get_layout(self, text, font):
        layout = PangoCairo.create_layout(self.cr)
        layout.set_font_description(parse_font(font))
        layout.set_text(text, -1)
        return layout

    def show_layout(self, layout, centered=True):
        """Render the given layout at the current point.

        If centered is True, then the logical box of the text is
        centered on said point, both horizontally and vertically.
        Otherwise, the current point is the top-left anchor of the text.
        """
        with self.save():
            if centered:
                rect = layout.get_pixel_extents()[1]
                x, y = self.cr.get_current_point()
                self.cr.translate(
                    x - rect.width * 0.5 - rect.x,
                    y - rect.height * 0.5 - rect.y)
                self.cr.move_to(0, 0)
            PangoCairo.show_layout(self.cr, layout)

    def show_text(self, text, font, centered=True):
        self.show_layout(self.get_layout(text, font), centered)

    def move_to(self, point):
        self.cr.move_to(*point)

    def line_to(self, point):
        self.cr.line_to(*point)

    def arc(self, center, rad, start, end):
        self.cr.arc(center.x, center.y, rad, start, end)

    def polygon(self, *points, close=True):
        self.move_to(points[0])
        for point in points[1:]:
            self.line_to(point)
        if close:
            self.cr.close_path()

    def clear_rect(self, rect):
        """Reset every pixel of `rect` to transparent."""
        with self.save():
            self.cr.set_operator(cairo.OPERATOR_CLEAR)
            self.cr.new_path()
            self.cr.rectangle(*rect.northwest(), rect.width, rect.height)
            self.cr.fill()

    def rotate(self, angle):
        # non-finite angles are ignored, like the html canvas does.
        if math.isfinite(angle):
            self.cr.rotate(angle)
        else:
            log.debug("ignoring non-finite rotation %r", angle)

    def save(self):
        return Save(self.cr)

    def rotated(self, angle):
        return Rotated(self, angle)

    def translated(self, dx, dy):
        return Translated(self.cr, dx, dy)


class Style(object):

    """Stroke and fill state applied in one step.

    Nothing is inherited from whatever was drawn before: `apply()`
    always sets both the source and the line width.
    """

    def __init__(self, color, line_width=1.0):
        self.color = color
        self.line_width = line_width

    def __repr__(self):
        return "Style(%r, %g)" % (self.color, self.line_width)

    def __eq__(self, o):
        return (isinstance(o, Style)
                and (self.color, self.line_width) == (o.color, o.line_width))

    def apply(self, cr):
        cr.set_source(parse_color(self.color))
        cr.set_line_width(self.line_width)

    def stroke(self, cr):
        self.apply(cr)
        cr.stroke()

    def fill(self, cr):
        self.apply(cr)
        cr.fill()


def parse_color(color):
    """Return a cairo pattern for `color`.

    Accepts a cairo.Pattern, an (r, g, b[, a]) tuple, an AARRGGBB hex
    string, or anything `Pango.Color.parse` understands (X11 color
    names, #rgb, #rrggbb). Unknown strings give opaque black.
    """

    if isinstance(color, cairo.Pattern):
        return color

    if isinstance(color, (tuple, list)):
        return cairo.SolidPattern(*color)

    text = str(color).strip()
    if len(text) == 8 and not text.startswith("#"):
        try:
            a = int(text[0:2], 16) / 0xFF
            r = int(text[2:4], 16) / 0xFF
            g = int(text[4:6], 16) / 0xFF
            b = int(text[6:8], 16) / 0xFF
            return cairo.SolidPattern(r, g, b, a)
        except ValueError:
            pass

    pc = Pango.Color()
    if pc.parse(text):
        return cairo.SolidPattern(
            pc.red / 0xFFFF, pc.green / 0xFFFF, pc.blue / 0xFFFF)

    log.warning("unknown color %r, using black", color)
    return cairo.SolidPattern(0, 0, 0)


def parse_font(font):
    if isinstance(font, Pango.FontDescription):
        return font
    return Pango.FontDescription.from_string(str(font))


class Point(object):

    """Reasonably terse 2D Point class."""

    def __init__(self, x, y): self.x = float(x) ; self.y = float(y)
    def __eq__(self, o):
        return isinstance(o, Point) and (self.x, self.y) == (o.x, o.y)
    def __repr__(self):       return "(%g,%g)" % (self.x, self.y)
    def __iter__(self):       yield  self.x ; yield self.y
    def __hash__(self):       return hash((self.x, self.y))

    def binop(func):
        def impl(self, x):
            o = x if isinstance(x, Point) else Point(x, x)
            return Point(func(self.x, o.x), func(self.y, o.y))
        return impl

    __add__  = binop(lambda a, b: a + b)


class Rect(object):

    """Rectangle operations for layout."""

    def __init__(self, center, width, height):
        self.center = center
        self.width = width
        self.height = height

    def __repr__(self):
        return "(%s, %g, %g)" % (self.center, self.width, self.height)

    def northwest(self):
        return self.center + Point(-0.5 * self.width, -0.5 * self.height)


class Save(object):

    """A context manager which Keeps calls to save() and restore() balanced."""

    def __init__(self, cr):
        self.cr = cr

    def __enter__(self):
        self.cr.save()

    def __exit__(self, unused1, unused2, unused3):
        self.cr.restore()


class Rotated(Save):

    """Rotate for the duration of the block, then restore."""

    def __init__(self, helper, angle):
        Save.__init__(self, helper.cr)
        self.helper = helper
        self.angle = angle

    def __enter__(self):
        self.cr.save()
        self.helper.rotate(self.angle)


class Translated(Save):

    """Move the origin for the duration of the block, then restore."""

    def __init__(self, cr, dx, dy):
        Save.__init__(self, cr)
        self.dx = dx
        self.dy = dy

    def __enter__(self):
        self.cr.save()
        self.cr.translate(self.dx, self.dy)
