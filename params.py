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

"""Text-based parameters for gauge configuration.

Each gauge option can be given as text: on the command line, or in a
`GAUGE_<NAME>` environment variable. The parameters here turn that
text into configuration values.
"""

from collections import OrderedDict
import json
import math
import os

import cairo
from gauge import DEFAULTS, canonical_name
from helpers import parse_color


class Parameter(object):

    """A uniform interface for creating parameters from the environment."""

    default = None

    def require(self, value, allowed_types):
        """Raise an error if `value` is not one of `allowed_types`.

        `allowed_types` may be a tuple or a single type.
        """

        if not isinstance(allowed_types, tuple):
            allowed_types = (allowed_types,)

        if not isinstance(value, allowed_types):
            raise TypeError("Expected one of %s, got %r." % (
                ", ".join(repr(t) for t in allowed_types),
                value
            ))

    def parse(self, text):
        raise NotImplementedError


class AngleParameter(Parameter):

    """An angle in radians.

    Text is read as radians, or as degrees when suffixed with `deg`.
    """

    def __init__(self, default):
        self.require(default, (float, int))
        self.default = default

    def parse(self, text):
        text = text.strip()
        if text.endswith("deg"):
            return math.radians(float(text[:-3]))
        return float(text)


class ColorParameter(Parameter):

    """A color name, hex string, or cairo pattern."""

    def __init__(self, default="black"):
        self.require(default, (str, tuple, cairo.Pattern))
        self.default = default

    def parse(self, text):
        return parse_color(text)


class FontParameter(Parameter):

    """A Pango font description, e.g. `arial 15px`."""

    def __init__(self, default="monospace"):
        self.require(default, str)
        self.default = default

    def parse(self, text):
        if not text.strip():
            raise ValueError("Empty font description")
        return text


class InfiniteParameter(Parameter):

    """A scalar value that is not constrained to a finite interval."""

    def __init__(self, default):
        self.require(default, (float, int))
        self.default = default

    def parse(self, text):
        return float(text)


class ListParameter(Parameter):

    """An ordered list of tick labels.

    Text is either a JSON array, which keeps the types of its items,
    or a comma separated list whose items are decoded like a single
    value, so that `1,2,3` gives numbers that `init_value` and stdin
    values can match.
    """

    def __init__(self, default=()):
        self.require(default, (tuple, list))
        self.default = tuple(default)

    def parse(self, text):
        text = text.strip()
        if text.startswith("["):
            items = json.loads(text)
            self.require(items, list)
            return tuple(items)
        if not text:
            return ()
        return tuple(parse_value(item) for item in text.split(","))


class ValueParameter(Parameter):

    """A single tick label.

    Text that reads as a JSON number, string or boolean is decoded, so
    `3` can select a tick from a JSON array of numbers. Anything else is
    taken as the literal text.
    """

    def __init__(self, default=None):
        self.default = default

    def parse(self, text):
        return parse_value(text)


class ToggleParameter(Parameter):

    """A parameter representing a binary choice."""

    def __init__(self, default):
        self.require(default, bool)
        self.default = default

    def parse(self, text):
        if text == "true":
            return True
        elif text == "false":
            return False

        raise ValueError("Could not parse {} as bool".format(text))


class ParameterGroup(object):

    """Manages the parameters that make up a gauge configuration.

    The value of a parameter is, in order of preference: an explicit
    override, the `GAUGE_<NAME>` environment variable, a group default,
    and finally the parameter's own default. Overrides and environment
    variables are text; group defaults are already-typed values, as
    read from a JSON config file.
    """

    prefix = "GAUGE_"

    def __init__(self):
        self.params = OrderedDict()
        self.defaults = {}
        self.overrides = {}

    def define(self, name, param):
        """Define a new parameter."""

        if name in self.params:
            raise ValueError("Parameter %s already defined" % name)
        self.params[name] = param

    def setDefaults(self, values):
        for key, value in values.items():
            self.defaults[self._lookup(key)] = value

    def setOverrides(self, pairs):
        for key, text in pairs:
            self.overrides[self._lookup(key)] = text

    def _lookup(self, key):
        name = canonical_name(key)
        if name not in self.params:
            raise ValueError("Unknown parameter %s" % key)
        return name

    def getValues(self):
        """Get the current value for each parameter, as dict."""
        return OrderedDict(
            (name, self.getParamValue(name, param))
            for name, param in self.params.items()
        )

    def getParamValue(self, name, param):
        env = self.prefix + name.upper()
        if name in self.overrides:
            return param.parse(self.overrides[name])
        elif env in os.environ:
            return param.parse(os.environ[env])
        elif name in self.defaults:
            return self.defaults[name]
        else:
            return param.default


def gaugeParameters():
    """A ParameterGroup covering every gauge option."""

    d = DEFAULTS
    group = ParameterGroup()
    group.define("values", ListParameter(d["values"]))
    group.define("init_value", ValueParameter(d["init_value"]))
    group.define("init_angle", AngleParameter(d["init_angle"]))
    group.define("delta_angle", AngleParameter(d["delta_angle"]))
    group.define("hand_radius", InfiniteParameter(d["hand_radius"]))
    group.define("hand_delta", InfiniteParameter(d["hand_delta"]))
    group.define("hand_color", ColorParameter(d["hand_color"]))
    group.define("rim_border_width", InfiniteParameter(d["rim_border_width"]))
    group.define("rim_color", ColorParameter(d["rim_color"]))
    group.define("title_reverse", ToggleParameter(d["title_reverse"]))
    group.define("font", FontParameter(d["font"]))
    group.define("first_aperture_range",
                 AngleParameter(d["first_aperture_range"]))
    group.define("first_aperture_color",
                 ColorParameter(d["first_aperture_color"]))
    group.define("second_aperture_range",
                 AngleParameter(d["second_aperture_range"]))
    group.define("second_aperture_color",
                 ColorParameter(d["second_aperture_color"]))
    return group


def parse_value(text):
    """Decode a JSON scalar, or return the stripped text."""

    text = text.strip()
    try:
        value = json.loads(text)
    except ValueError:
        return text
    if isinstance(value, (list, dict)) or value is None:
        return text
    return value


def loadConfig(path):
    """Read a gauge configuration from a JSON file."""

    with open(path, "r") as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError("%s: expected a JSON object" % path)
    return config
