#! /usr/bin/python3
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


"""Offline rendering of gauges.

Renders a gauge to a file or stdout as determined by the given
options. Values to display are read from stdin, one per line: either a
JSON object with a "value" key, a JSON scalar, or bare text.

The following modes of operation are supported:
- nostdin    -- do not read values from stdin. the initial value of
                the configuration is rendered.
- oneshot    -- render a single value from stdin.
- continuous -- overwrite the same output file (PNG only).
- sequence   -- render each value as a separate file in the given
                directory (PNG only).
- slideshow  -- render each value as a separate page in the given file
                (PS and PDF only).

With --watch, the gauge is rendered again each time the --config file
changes.
"""

import argparse
import json
import logging
import os
import sys
import threading

import cairo
from watchdog.observers import Observer
from watchdog.events import LoggingEventHandler

from gauge import Gauge
from params import gaugeParameters, loadConfig, parse_value


log = logging.getLogger(__name__)


def pt_to_pixel(pts, dpi):
    return int(pts * dpi / 72.0)

def mm_to_in(mm):
    return mm / 25.4

def in_to_pt(inches):
    return inches * 72

def parse_unit(value):
    """Convert a physical size to points.

    - no unit: assume points.
    - mm: convert to inch, then convert points
    - in: convert to to points.
    - pt: do not convert.
    """
    if value.endswith("mm"):
        return in_to_pt(mm_to_in(float(value[:-2])))
    elif value.endswith("in"):
        return in_to_pt(float(value[:-2]))
    elif value.endswith("pt"):
        return float(value[:-2])
    else:
        return float(value)


class UserError(Exception):
    pass


class SurfaceWrapper:
    """Abstract the different output formats cairo supports.

    There are some wierd asymmetries in the cairo API. This family of
    classes attempts to smooth this over.

    In particular, there's no obvious way to create a "blank" PNG
    surface for painting. Rather, one creates an ImageSurface and writes
    it as a .png file.

    While we're here, we also abstract over the different supported
    modes of operation.
    """

    @classmethod
    def from_args(self, args):
        fmt = args.format
        if   fmt == "png": return PngSurfaceWrapper(args)
        elif fmt == "ps":  return PsSurfaceWrapper(args)
        elif fmt == "pdf": return PdfSurfaceWrapper(args)
        elif fmt == "svg": return SvgSurfaceWrapper(args)
        raise UserError("Unsupported format: %s" % fmt)

    def gauge(self, config):
        return Gauge(self.cr, config)

    def nostdin(self, gauge):
        self.write()

    def oneshot(self, gauge, reader, stream):
        try:
            line = stream.readline()
            # no input keeps the initial value on display.
            if line.strip():
                reader.update(line)
                gauge.setValue(reader.value)
        finally:
            self.write()

    def continuous(self, gauge, reader, stream):
        for line in reader.lines(stream):
            try:
                gauge.setValue(reader.value)
            finally:
                self.write()

    def sequence(self, gauge, reader, stream):
        for (i, line) in enumerate(reader.lines(stream)):
            self.next_image(i)
            try:
                gauge.setValue(reader.value)
            finally:
                self.write()

    def slideshow(self, gauge, reader, stream):
        try:
            for line in reader.lines(stream):
                gauge.setValue(reader.value)
                self.next_page()
        finally:
            self.write()

    def next_image(self, index):
        raise UserError("The %s format does not support sequences." % self.name)

    def next_page(self):
        raise UserError("The %s format does not support slideshows." % self.name)

    def write(self):
        """Defined by all subclasses."""
        raise NotImplementedError


class PngSurfaceWrapper(SurfaceWrapper):

    name = "PNG"

    def __init__(self, args):
        width, height = (pt_to_pixel(v, args.dpi) for v in args.size)
        self.surface = cairo.ImageSurface(cairo.Format.ARGB32, width, height)
        self.cr = cairo.Context(self.surface)

        if args.output is None:
            # The only reason for this is that `cairo_surface_write_to_png_stream`
            # is not exposed by pycairo.
            raise UserError("PNG does not support streaming to stdout.")
        elif args.mode == "sequence":
            self.output_dir = args.output
            os.makedirs(self.output_dir, exist_ok=True)
            self.output = None
        else:
            self.output = args.output

    def write(self):
        log.debug("writing %s", self.output)
        self.surface.write_to_png(self.output)

    def next_image(self, index):
        self.output = os.path.join(self.output_dir, "%d.png" % index)


class VectorSurfaceWrapper(SurfaceWrapper):

    """Formats which cairo streams to a file object or path."""

    factory = None

    def __init__(self, args):
        if args.mode in ("continuous", "sequence"):
            raise UserError(
                "The %s format does not support %s mode." % (self.name, args.mode))
        target = args.output if args.output is not None else sys.stdout.buffer
        width, height = args.size
        self.surface = self.factory(target, width, height)
        self.cr = cairo.Context(self.surface)
        self.pages = 0

    def next_page(self):
        self.cr.show_page()
        self.pages += 1

    def write(self):
        self.surface.finish()


class PsSurfaceWrapper(VectorSurfaceWrapper):
    name = "PS"
    factory = cairo.PSSurface


class PdfSurfaceWrapper(VectorSurfaceWrapper):
    name = "PDF"
    factory = cairo.PDFSurface


class SvgSurfaceWrapper(VectorSurfaceWrapper):
    name = "SVG"
    factory = cairo.SVGSurface

    def next_page(self):
        raise UserError("The SVG format does not support slideshows.")


class ValueReader:
    """Decodes gauge values from lines of text.

    A line holds a JSON object with a "value" key, as produced by a
    telemetry feed, a JSON scalar, or bare text. Blank lines are
    skipped by `lines()`.
    """

    def __init__(self):
        self.value = None

    def update(self, line):
        text = line.strip()
        try:
            doc = json.loads(text)
        except ValueError:
            doc = None
        if isinstance(doc, dict):
            self.value = doc.get("value")
        else:
            self.value = parse_value(text)

    def lines(self, stream):
        for line in stream:
            if line.strip():
                self.update(line)
                yield line


class FileWatcher(object):

    """Fire a callback when the specified file changes."""

    def __init__(self):
        self.callbacks = {}
        self.ev_handler = LoggingEventHandler()
        self.ev_handler.on_any_event = self.modified
        self.observer = Observer()

    def start(self):
        self.observer.start()

    def stop(self):
        self.observer.stop()
        self.observer.join()

    def watchFile(self, path, callback):
        # unlike inotify, `watchdog` cannot watch a single file for
        # changes directly. instead we must watch the parent directory
        # for all events, and filter out the ones we don't care about.
        path = os.path.abspath(path)
        parent = os.path.split(path)[0]
        self.observer.schedule(self.ev_handler, parent, recursive=False)
        self.callbacks[path] = callback

    def modified(self, event):
        # editors that save atomically move a temp file over the original.
        if event.event_type == "moved":
            path = event.dest_path
        elif event.event_type in ("modified", "created"):
            path = event.src_path
        else:
            return
        path = os.path.abspath(path)
        if path in self.callbacks:
            self.callbacks[path]()


def build_config(args):
    group = gaugeParameters()
    try:
        if args.config is not None:
            group.setDefaults(loadConfig(args.config))
        group.setOverrides(args.params or [])
        return group.getValues()
    except (OSError, ValueError, TypeError) as e:
        raise UserError("Bad configuration: %s" % e)


def render(args, stream):
    wrapper = SurfaceWrapper.from_args(args)
    gauge = wrapper.gauge(build_config(args))
    reader = ValueReader()

    if   args.mode == "nostdin":    wrapper.nostdin(gauge)
    elif args.mode == "oneshot":    wrapper.oneshot(gauge,    reader, stream)
    elif args.mode == "continuous": wrapper.continuous(gauge, reader, stream)
    elif args.mode == "sequence":   wrapper.sequence(gauge,   reader, stream)
    elif args.mode == "slideshow":  wrapper.slideshow(gauge,  reader, stream)


def watch(args):
    """Render, then render again whenever the config file changes."""

    if args.config is None:
        raise UserError("--watch requires --config.")
    if args.mode != "nostdin":
        raise UserError("--watch only works in nostdin mode.")

    lock = threading.Lock()

    def rerender():
        with lock:
            log.info("reloading: %s", args.config)
            try:
                render(args, None)
            except UserError as e:
                log.error("%s", e)

    render(args, None)
    fw = FileWatcher()
    fw.watchFile(args.config, rerender)
    fw.start()
    try:
        log.info("watching %s", args.config)
        while fw.observer.is_alive():
            fw.observer.join(1)
    except KeyboardInterrupt:
        pass
    finally:
        fw.stop()


def make_parser():
    desc = "Render a gauge to a stand-alone image."
    parser = argparse.ArgumentParser(prog="cairo-gauge", description=desc)

    parser.add_argument(
        "-m", "--mode",
        help="Specifies output mode",
        metavar="MODE",
        choices=("nostdin", "oneshot", "continuous", "sequence", "slideshow"),
        default="nostdin"
    )

    parser.add_argument(
        "-f", "--format",
        help="Output file format",
        metavar="FMT",
        choices=("png", "ps", "pdf", "svg"),
        required=True
    )

    parser.add_argument(
        "-o", "--output",
        help="The output file path (defaults to `stdout`)",
        metavar="FILE",
        type=str
    )

    parser.add_argument(
        "-s", "--size",
        help="The width and height of the output image in physical units",
        nargs=2,
        type=parse_unit,
        required=True
    )

    parser.add_argument(
        "-d", "--dpi",
        help="Override default DPI (PNG only).",
        metavar="DPI",
        default=96,
        type=int,
    )

    parser.add_argument(
        "-c", "--config",
        help="A JSON file holding the gauge configuration",
        metavar="FILE",
    )

    parser.add_argument(
        "-p", "--param",
        help="Specify the value of a gauge option.",
        nargs=2,
        metavar=("NAME", "VALUE"),
        dest="params",
        action="append",
    )

    parser.add_argument(
        "-w", "--watch",
        help="Render again whenever the config file changes.",
        action="store_true",
    )

    parser.add_argument(
        "-v", "--verbose",
        help="Log debugging output.",
        action="store_true",
    )

    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S')

    try:
        if args.watch:
            watch(args)
        else:
            render(args, sys.stdin)
    except UserError as e:
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
