import io
import math

import cairo
import pytest

from conftest import ink, local_frame, matrix, pixel, pixels
from gauge import Gauge, GaugeError, KEFS, RIM, label_text


def record_hand(monkeypatch, gauge):
    angles = []
    draw = gauge._drawHand

    def spy(angle):
        angles.append(angle)
        draw(angle)

    monkeypatch.setattr(gauge, "_drawHand", spy)
    return angles


def test_angle_of_endpoints(surface):
    g = Gauge(surface, values=list("ABCDE"), delta_angle=3.0)
    assert g.angleOf(0) == 0
    assert g.angleOf(2) == pytest.approx(1.5)
    assert g.angleOf(4) == pytest.approx(3.0)


def test_angle_of_is_linear(surface):
    g = Gauge(surface, values=list(range(7)), delta_angle=2.4)
    for n in range(7):
        assert g.angleOf(n) == pytest.approx(n / 6 * 2.4)


def test_missing_value_selects_index_before_first_tick(surface, monkeypatch):
    g = Gauge(surface, values=["A", "B", "C"], delta_angle=2.0)
    angles = record_hand(monkeypatch, g)
    g.setValue("NotInList")
    assert angles == [pytest.approx(-1.0)]


def test_set_value_moves_hand(surface, monkeypatch):
    g = Gauge(surface, values=["Low", "Mid", "High"])
    angles = record_hand(monkeypatch, g)
    g.setValue("Mid")
    g.setValue("High")
    g.setValue("Low")
    delta = g.config.delta_angle
    assert angles == [pytest.approx(delta / 2), pytest.approx(delta), 0]


def test_full_turn_last_value_points_like_first(surface, monkeypatch):
    g = Gauge(surface, values=["A", "B", "C"], delta_angle=2 * math.pi)
    angles = record_hand(monkeypatch, g)
    g.setValue("C")
    g.setValue("A")
    assert angles[0] == pytest.approx(2 * math.pi)
    assert math.fmod(angles[0], 2 * math.pi) == pytest.approx(angles[1])


def test_initial_value_defaults_to_first(surface):
    g = Gauge(surface, values=["Low", "Mid", "High"])
    assert g.config.init_value == "Low"


def test_single_value_degrades_without_error(surface, monkeypatch):
    g = Gauge(surface, values=["only"])
    assert math.isnan(g.angleOf(0))
    assert g.angleOf(-1) == -math.inf
    angles = record_hand(monkeypatch, g)
    g.setValue("only")
    assert math.isnan(angles[0])
    assert matrix(g.cr) == pytest.approx(
        local_frame(100, 100, g.config.init_angle))


def test_no_values_puts_hand_at_end_of_arc(surface, monkeypatch):
    g = Gauge(surface)
    assert g.config.init_value is None
    angles = record_hand(monkeypatch, g)
    g.setValue("anything")
    assert angles == [pytest.approx(g.config.delta_angle)]


@pytest.mark.parametrize("reverse", [False, True])
def test_transform_restored(reverse):
    surface = cairo.ImageSurface(cairo.Format.ARGB32, 200, 100)
    g = Gauge(surface, values=["A", "B", "C", "D"], init_angle=0.3,
              title_reverse=reverse)
    expected = local_frame(100, 50, 0.3)
    assert matrix(g.cr) == pytest.approx(expected)

    for value in ["B", "D", "NotInList", "A"]:
        g.setValue(value)
        assert matrix(g.cr) == pytest.approx(expected)


def test_redraw_independent_of_history():
    config = dict(values=["A", "B", "C"], init_angle=0, title_reverse=True)

    first = cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)
    g = Gauge(first, config)
    g.setValue("B")
    g.setValue("C")

    second = cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)
    Gauge(second, config, init_value="C")

    assert pixels(first) == pixels(second)


def test_set_value_is_idempotent():
    surface = cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)
    g = Gauge(surface, values=["A", "B", "C"], init_angle=0, title_reverse=True)
    g.setValue("B")
    once = pixels(surface)
    g.setValue("B")
    assert pixels(surface) == once
    assert matrix(g.cr) == pytest.approx(local_frame(100, 100, 0))


def test_set_value_draws_something(surface):
    blank = pixels(cairo.ImageSurface(cairo.Format.ARGB32, 200, 200))
    Gauge(surface, values=["A", "B"])
    assert pixels(surface) != blank


@pytest.mark.parametrize("first,second,delta", [
    (math.pi / 4, math.pi / 4, 4 / 3 * math.pi),
    (0, 0, math.pi),
    (0.5, 0, 2.0),
    (1.0, 1.0, 2.0),
])
def test_rim_segments_are_contiguous(surface, first, second, delta):
    g = Gauge(surface, first_aperture_range=first,
              second_aperture_range=second, delta_angle=delta)
    segments = g.rimSegments()
    assert len(segments) == 3
    assert segments[0][0] == 0
    assert segments[0][1] == pytest.approx(segments[1][0])
    assert segments[1][1] == pytest.approx(segments[2][0])
    assert segments[2][1] == pytest.approx(delta)
    assert segments[2][1] - segments[1][1] == pytest.approx(second)
    assert segments[1][1] - segments[1][0] == pytest.approx(first)


def test_rim_styles(surface):
    g = Gauge(surface, rim_color="grey", rim_border_width=7,
              first_aperture_color="orange", second_aperture_color="red")
    styles = [style for (start, end, style) in g.rimSegments()]
    assert [s.color for s in styles] == ["grey", "orange", "red"]
    assert all(s.line_width == 7 for s in styles)


def test_label_geometry(surface):
    normal = Gauge(surface, values=["A", "B"])
    reverse = Gauge(cairo.ImageSurface(cairo.Format.ARGB32, 200, 200),
                    values=["A", "B"], title_reverse=True)

    assert normal.labelGeometry() == pytest.approx(
        tuple(100 * k for k in KEFS[False]))
    assert reverse.labelGeometry() == pytest.approx((71, 75, 65))
    assert normal.labelGeometry() != reverse.labelGeometry()
    assert all(r < RIM * 100 for r in reverse.labelGeometry())
    assert all(r > RIM * 100 for r in normal.labelGeometry())


def test_radius_from_smaller_side():
    g = Gauge(cairo.ImageSurface(cairo.Format.ARGB32, 300, 120))
    assert g.radius == 60
    assert matrix(g.cr)[4:] == pytest.approx((150, 60))


def test_radius_rounds_half_up():
    g = Gauge(cairo.ImageSurface(cairo.Format.ARGB32, 201, 201))
    assert g.radius == 101


def test_accepts_context(surface):
    cr = cairo.Context(surface)
    g = Gauge(cr, values=["A"])
    assert g.cr is cr


def test_accepts_bounded_recording_surface():
    surface = cairo.RecordingSurface(
        cairo.Content.COLOR_ALPHA, cairo.Rectangle(0, 0, 120, 80))
    g = Gauge(surface, values=["A", "B"], init_angle=0)
    assert g.radius == 40
    assert matrix(g.cr) == pytest.approx(local_frame(60, 40, 0))


def test_accepts_vector_surface():
    surface = cairo.PDFSurface(io.BytesIO(), 300, 200)
    g = Gauge(surface, values=["A", "B"])
    assert g.radius == 100
    surface.finish()


@pytest.mark.parametrize("selector", ["#gauge", None, 42, object()])
def test_bad_selector_raises(selector):
    with pytest.raises(GaugeError, match="Couldn't create drawing surface"):
        Gauge(selector, values=["A"])


def test_unbounded_recording_surface_raises():
    surface = cairo.RecordingSurface(cairo.Content.COLOR_ALPHA, None)
    with pytest.raises(GaugeError):
        Gauge(surface)


def test_label_text():
    assert label_text("Low") == "Low"
    assert label_text(3) == "3"
    assert label_text(3.0) == "3"
    assert label_text(2.5) == "2.5"
    assert label_text(True) == "true"


def test_finished_surface_raises():
    surface = cairo.ImageSurface(cairo.Format.ARGB32, 100, 100)
    surface.finish()
    with pytest.raises(GaugeError):
        Gauge(surface, values=["A"])


def is_color(argb, r, g, b):
    a, pr, pg, pb = argb
    return a > 250 and all(abs(p - q) < 5 for (p, q) in
                           zip((pr, pg, pb), (r, g, b)))


def upright_gauge(**config):
    surface = cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)
    options = dict(values=["A", "B", "C"], init_angle=0,
                   delta_angle=math.pi / 2, hand_color="#0000ff",
                   hand_delta=8, rim_color="#00ff00",
                   first_aperture_range=math.pi / 8,
                   second_aperture_range=math.pi / 8,
                   second_aperture_color="#ff0000")
    options.update(config)
    return surface, Gauge(surface, options)


def test_hand_points_at_selected_value():
    # center (100, 100), radius 100: sample the hand at 0.6 r.
    surface, g = upright_gauge()
    assert is_color(pixel(surface, 160, 100), 0, 0, 255)
    assert pixel(surface, 100, 160) == (0, 0, 0, 0)

    g.setValue("C")
    assert is_color(pixel(surface, 100, 160), 0, 0, 255)
    assert pixel(surface, 160, 100) == (0, 0, 0, 0)

    g.setValue("B")
    assert is_color(pixel(surface, 142, 142), 0, 0, 255)
    assert pixel(surface, 100, 160) == (0, 0, 0, 0)


def test_init_angle_rotates_whole_gauge():
    surface, g = upright_gauge(init_angle=math.pi / 2)
    assert is_color(pixel(surface, 100, 160), 0, 0, 255)
    g.setValue("C")
    assert is_color(pixel(surface, 40, 100), 0, 0, 255)


def test_rim_drawn_at_rim_radius():
    surface, g = upright_gauge(init_value="C")
    # neutral zone starts at angle 0, 0.8 r from the center.
    assert is_color(pixel(surface, 180, 100), 0, 255, 0)
    assert pixel(surface, 170, 100) == (0, 0, 0, 0)
    assert pixel(surface, 176, 100) == (0, 0, 0, 0)
    # the second aperture ends the arc, just before delta_angle.
    assert is_color(pixel(surface, 103, 179), 255, 0, 0)


def test_labels_stay_upright():
    # a wide label a quarter turn from the x axis must still be wide.
    transparent = (0, 0, 0, 0)
    surface = cairo.ImageSurface(cairo.Format.ARGB32, 200, 200)
    Gauge(surface, values=["MMMMMMMM", "B"], init_angle=math.pi / 4,
          delta_angle=math.pi, title_reverse=True, font="sans 12px",
          hand_color=transparent, first_aperture_range=math.pi,
          second_aperture_range=0, first_aperture_color=transparent)

    # label anchor 0.65 r along pi / 4; tick mark around 0.73 r.
    tick = 100 + 73 * math.cos(math.pi / 4)

    def near_label(x, y):
        return x >= 90 and y >= 90 and (x - tick) ** 2 + (y - tick) ** 2 > 36

    points = ink(surface, near_label)
    assert len(points) > 20
    xs = [x for (x, y) in points]
    ys = [y for (x, y) in points]
    width = max(xs) - min(xs)
    height = max(ys) - min(ys)
    assert width > 2 * height
    assert min(xs) < 146 < max(xs)
    assert min(ys) <= 146 <= max(ys)
