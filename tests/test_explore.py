import PIL.Image
import pytest

import explore
from mandelview import DEFAULT_VIEWPORT, ColormapPalette, Viewport


def _config(*args):
    parser = explore.build_parser()
    return explore.resolve_config(parser.parse_args(list(args)), parser)


def test_defaults_match_the_reference_window():
    config = _config()
    assert config.params.viewport == DEFAULT_VIEWPORT
    assert (config.params.grid.width, config.params.grid.height) == (740, 605)
    assert config.params.max_iterations == 50
    assert config.params.coordinates == "direct"
    assert config.backend == "python"
    assert config.palette is None
    assert not config.preview


def test_bounds_are_parsed_from_text():
    config = _config("--re-min", "-1", "--re-max", "0.5", "--im-min", "-0.5", "--im-max", "0.5")
    assert config.params.viewport == Viewport(-1.0, 0.5, -0.5, 0.5)


@pytest.mark.parametrize(
    "args",
    [
        ["--re-min", "abc"],
        ["--re-min", "2"],
        ["--width", "0"],
        ["--max-iterations", "0"],
        ["--zoom", "-1"],
        ["--focus", "800", "0"],
        ["--inside-color", "#000000"],
        ["--colormap", "viridis", "--inside-color", "#zzzzzz"],
        ["--colormap", "not-a-colormap"],
        ["--invert"],
        ["--columns", "0"],
        ["--timeout", "0"],
    ],
)
def test_invalid_options_exit(args, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _config(*args)
    assert excinfo.value.code == 2


def test_focus_and_zoom_move_the_viewport():
    config = _config("--width", "30", "--height", "20", "--focus", "0", "0", "--zoom", "0.5")
    viewport = config.params.viewport
    assert viewport.re_center == pytest.approx(-2.0)
    assert viewport.re_width == pytest.approx(1.5)


def test_colormap_options_build_a_palette():
    config = _config("--colormap", "magma", "--inside-color", "#000000", "--invert")
    assert config.palette == ColormapPalette("magma", inside_color=(0, 0, 0), invert=True)


def test_ansi_preview_uses_half_blocks():
    image = PIL.Image.new("RGB", (10, 6), (1, 2, 3))
    preview = explore.ansi_preview(image, 5)
    lines = preview.split("\n")
    assert len(lines) == 2
    assert lines[0].count("▀") == 5
    assert "\033[38;2;1;2;3m" in lines[0]
    assert lines[0].endswith("\033[0m")


def test_main_prints_summary_and_preview(capsys):
    code = explore.main(["--width", "24", "--height", "18", "--max-iterations", "20", "--preview", "--columns", "12"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Grid: 24x18" in out
    assert "In set:" in out
    assert "▀" in out


def test_main_reports_cancelled_render(capsys, monkeypatch):
    def cancelled(*args, **kwargs):
        raise explore.RenderCancelled("Render cancelled before completion.")

    monkeypatch.setattr(explore, "render_frame", cancelled)
    code = explore.main(["--width", "8", "--height", "8", "--timeout", "60"])
    assert code == 1
    assert "cancelled" in capsys.readouterr().err
