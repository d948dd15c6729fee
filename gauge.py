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


"""
Analog gauge over a fixed, ordered list of discrete values.

The gauge is drawn onto a cairo context: a rim with two colored
"aperture" zones at the end of its arc, one labelled tick per value,
and a hand pointing at the selected value.

    surface = cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)
    g = Gauge(surface, values=["Low", "Mid", "High"])
    g.setValue("High")
    surface.write_to_png("gauge.png")

The transform set up at construction (origin at the center of the
surface, rotated by `init_angle`) is the gauge-local frame. Every
public call leaves the context in that frame.
"""

from collections import OrderedDict, namedtuple
import logging
import math
import re

import cairo

from helpers import Helper, Point, Rect, Style


log = logging.getLogger(__name__)


DEFAULTS = OrderedDict([
    ("values", ()),
    ("init_value", ''),

    ("init_angle", (5 / 6) * math.pi),
    ("delta_angle", (4 / 3) * math.pi),

    ("hand_radius", 10),
    ("hand_delta", 5),
    ("hand_color", 'blue'),

    ("rim_border_width", 3),
    ("rim_color", 'grey'),

    ("title_reverse", False),
    ("font", 'arial 15px'),

    ("first_aperture_range", math.pi / 4),
    ("first_aperture_color", 'orange'),
    ("second_aperture_range", math.pi / 4),
    ("second_aperture_color", 'red'),
])


Config = namedtuple("Config", DEFAULTS.keys())


# Fractions of the radius.
RIM = 0.8
HAND = 0.92
TICK_WIDTH = 2

# title_reverse -> (tick start, tick end, label anchor)
KEFS = {
    False: (0.85, 0.89, 0.95),
    True:  (0.71, 0.75, 0.65),
}


class GaugeError(Exception):
    pass


def canonical_name(name):
    """Map a camelCase configuration key to its snake_case name."""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def _kind(value):
    if isinstance(value, bool):
        return bool
    if isinstance(value, (int, float)):
        return float
    return type(value)


def indexOf(values, value):
    """Position of the first strictly equal item, or -1.

    Numbers only match numbers and booleans only booleans, so that
    `True` does not select a tick labelled `1`. NaN matches nothing.
    """

    for i, item in enumerate(values):
        if _kind(item) is _kind(value) and item == value:
            return i
    return -1


def normalize(config=None, **overrides):
    """Overlay `config` and `overrides` onto DEFAULTS.

    Keys may be given in snake_case or camelCase. `values` replaces the
    default wholesale. An `init_value` that is not one of `values`
    falls back to the first value (or None if there are none).
    """

    merged = OrderedDict(DEFAULTS)
    if hasattr(config, "_asdict"):
        config = config._asdict()
    user = dict(config or {})
    user.update(overrides)

    for key, value in user.items():
        name = canonical_name(key)
        if name not in merged:
            log.warning("ignoring unknown gauge option %r", key)
            continue
        merged[name] = value

    merged["values"] = tuple(merged["values"])
    values = merged["values"]
    if indexOf(values, merged["init_value"]) < 0:
        merged["init_value"] = values[0] if values else None

    return Config(**merged)


def round_half_up(value):
    return int(math.floor(value + 0.5))


def label_text(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Gauge(object):

    """Renders a discrete-value gauge onto a cairo surface.

    `selector` is a cairo.Context or cairo.Surface. Raises GaugeError
    if no drawing context can be made from it.
    """

    def __init__(self, selector, config=None, **overrides):
        self.config = normalize(config, **overrides)

        try:
            self.cr = self._acquire(selector)
            x, y, width, height = self._extents(self.cr)
            self.radius = round_half_up(min(width, height) / 2)
        except GaugeError:
            raise
        except (cairo.Error, TypeError) as e:
            raise GaugeError("Couldn't create drawing surface") from e

        self.helpers = Helper(self.cr)

        log.debug("gauge of radius %d on %gx%g surface", self.radius,
                  width, height)

        self.cr.translate(x + round_half_up(width / 2),
                          y + round_half_up(height / 2))
        self.helpers.rotate(self.config.init_angle)

        self.setValue(self.config.init_value)

    def _acquire(self, selector):
        if isinstance(selector, cairo.Context):
            return selector
        if isinstance(selector, cairo.Surface):
            return cairo.Context(selector)
        raise GaugeError("Couldn't create drawing surface")

    def _extents(self, cr):
        """The (x, y, width, height) of the drawable area."""
        target = cr.get_target()
        if isinstance(target, cairo.ImageSurface):
            return 0, 0, target.get_width(), target.get_height()
        if isinstance(target, cairo.RecordingSurface):
            extents = target.get_extents()
            if extents is None:
                raise GaugeError("Couldn't create drawing surface")
            return extents.x, extents.y, extents.width, extents.height
        x1, y1, x2, y2 = cr.clip_extents()
        return x1, y1, x2 - x1, y2 - y1

    def angleOf(self, n):
        """Angle of tick `n`, measured from the gauge-local zero."""
        divisor = len(self.config.values) - 1
        if divisor == 0:
            return math.nan if n == 0 else math.copysign(
                math.inf, n) * self.config.delta_angle
        return (n / divisor) * self.config.delta_angle

    def rimSegments(self):
        """The (start, end, style) of each rim arc, in drawing order."""
        c = self.config
        neutral = c.delta_angle - c.first_aperture_range - c.second_aperture_range
        first = neutral + c.first_aperture_range
        return [
            (0, neutral, Style(c.rim_color, c.rim_border_width)),
            (neutral, first, Style(c.first_aperture_color, c.rim_border_width)),
            (first, c.delta_angle,
             Style(c.second_aperture_color, c.rim_border_width)),
        ]

    def labelGeometry(self):
        """Tick start, tick end and label anchor radii."""
        return tuple(self.radius * k for k in KEFS[bool(self.config.title_reverse)])

    def _clear(self):
        r = self.radius
        self.helpers.clear_rect(Rect(Point(0, 0), 2 * r, 2 * r))

    def _drawRim(self):
        for (start, end, style) in self.rimSegments():
            self.cr.new_path()
            self.helpers.arc(Point(0, 0), self.radius * RIM, start, end)
            style.stroke(self.cr)

    def _drawTitle(self, angle, title):
        cr = self.cr
        tick_start, tick_end, anchor = self.labelGeometry()
        tick = Style(self.config.rim_color, TICK_WIDTH)

        with self.helpers.rotated(angle):
            cr.new_path()
            cr.move_to(tick_start, 0)
            cr.line_to(tick_end, 0)
            tick.stroke(cr)

            # keep the text upright whatever the gauge rotation.
            with self.helpers.translated(anchor, 0):
                self.helpers.rotate(-(self.config.init_angle + angle))
                tick.apply(cr)
                cr.move_to(0, 0)
                self.helpers.show_text(label_text(title), self.config.font)
            cr.new_path()

    def _drawHand(self, angle):
        cr = self.cr
        style = Style(self.config.hand_color, TICK_WIDTH)

        cr.new_path()
        self.helpers.circle(Point(0, 0), self.config.hand_radius)
        style.apply(cr)
        cr.stroke_preserve()
        cr.fill()

        with self.helpers.rotated(angle):
            delta = self.config.hand_delta
            self.helpers.polygon(
                Point(0, -delta),
                Point(self.radius * HAND, 0),
                Point(0, delta))
            style.fill(cr)

    def _drawGauge(self):
        self._clear()
        self._drawRim()
        for (i, value) in enumerate(self.config.values):
            self._drawTitle(self.angleOf(i), value)

    def setValue(self, value):
        """Select `value` and repaint the whole gauge.

        `value` should be one of the configured values. Anything else
        selects index -1, which puts the hand one step before the
        first tick.
        """

        index = indexOf(self.config.values, value)
        if index < 0:
            log.debug("%r is not a gauge value", value)

        self._drawGauge()
        self._drawHand(self.angleOf(index))
