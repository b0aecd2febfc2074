import pytest

from mandelview import (
    DEFAULT_VIEWPORT,
    ConfigurationError,
    Grid,
    RenderParameters,
    Viewport,
    ViewportParseError,
    apply_zoom,
    parse_viewport,
    pixel_to_complex,
    recenter,
    sampling_metadata,
)


def test_parse_viewport_reads_text_fields():
    viewport = parse_viewport("-2", " 1.0 ", "-1.2", "1.2e0")
    assert viewport == Viewport(-2.0, 1.0, -1.2, 1.2)


@pytest.mark.parametrize("position", range(4))
def test_parse_viewport_names_the_bad_field(position):
    fields = ["-2", "1", "-1.2", "1.2"]
    fields[position] = "reMax"
    with pytest.raises(ViewportParseError) as excinfo:
        parse_viewport(*fields)
    assert excinfo.value.field == ("re_min", "re_max", "im_min", "im_max")[position]
    assert excinfo.value.text == "reMax"


def test_parse_viewport_rejects_inverted_bounds():
    with pytest.raises(ConfigurationError):
        parse_viewport("1", "-2", "-1.2", "1.2")


def test_parse_viewport_rejects_infinite_bounds():
    with pytest.raises(ConfigurationError):
        parse_viewport("-inf", "1", "-1.2", "1.2")


def test_from_center_round_trips_properties():
    viewport = Viewport.from_center(-0.75, 0.0, 2.5, 2.0)
    assert viewport == Viewport(-2.0, 0.5, -1.0, 1.0)
    assert viewport.re_center == pytest.approx(-0.75)
    assert viewport.im_center == pytest.approx(0.0)
    assert viewport.re_width == pytest.approx(2.5)
    assert viewport.im_height == pytest.approx(2.0)


def test_apply_zoom_keeps_center():
    zoomed = apply_zoom(DEFAULT_VIEWPORT, 0.5)
    assert zoomed.re_center == pytest.approx(DEFAULT_VIEWPORT.re_center)
    assert zoomed.im_center == pytest.approx(DEFAULT_VIEWPORT.im_center)
    assert zoomed.re_width == pytest.approx(1.5)
    assert zoomed.im_height == pytest.approx(1.2)


@pytest.mark.parametrize("factor", [0.0, -1.0, float("nan")])
def test_apply_zoom_rejects_bad_factor(factor):
    with pytest.raises(ConfigurationError):
        apply_zoom(DEFAULT_VIEWPORT, factor)


def test_recenter_moves_to_pixel_coordinate():
    params = RenderParameters(DEFAULT_VIEWPORT, Grid(740, 605), 50)
    metadata = sampling_metadata(params)
    moved = recenter(DEFAULT_VIEWPORT, metadata, 0, 0)
    assert moved.re_center == pytest.approx(-2.0)
    assert moved.im_center == pytest.approx(-1.2)
    assert moved.re_width == pytest.approx(DEFAULT_VIEWPORT.re_width)
    assert moved.im_height == pytest.approx(DEFAULT_VIEWPORT.im_height)


def test_pixel_to_complex_rejects_pixels_outside_grid():
    metadata = sampling_metadata(RenderParameters(DEFAULT_VIEWPORT, Grid(10, 8), 5))
    assert pixel_to_complex(metadata, 9, 7) == pytest.approx((-2.0 + 9 * 0.3, -1.2 + 7 * 0.3))
    for x, y in [(10, 0), (0, 8), (-1, 0)]:
        with pytest.raises(IndexError):
            pixel_to_complex(metadata, x, y)
