"""Tests for termglobe.canvas module.

Covers:
- Canvas sizing in sub-pixels and characters, clearing, bounds
- select_character ramp indexing and clamping
- resolve_ramp precedence
- rasterize end to end: sampling agrees with the texture, blank outside the
  visible disc, orbit wrap-around, uniform textures, determinism
"""

from __future__ import annotations

import math

import pytest

from termglobe.camera import Camera, CameraConfig
from termglobe.canvas import (
    BLANK,
    DEFAULT_RAMP,
    Canvas,
    rasterize,
    resolve_ramp,
    select_character,
    shade_cell,
)
from termglobe.errors import ConfigError
from termglobe.globe import Globe, SphereTemplate, build_globe
from termglobe.palettes import get_palette
from termglobe.projector import SphereProjector
from termglobe.texture import Texture


def _checkerboard(width: int = 8, height: int = 4) -> Texture:
    return Texture.from_rows(
        [[1.0 if (r + c) % 2 == 0 else 0.5 for c in range(width)] for r in range(height)]
    )


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------

class TestCanvas:
    def test_sub_pixel_size(self) -> None:
        canvas = Canvas(160, 160)
        assert canvas.size == (40, 20)
        assert canvas.char_pix == (4, 8)

    def test_from_cells(self) -> None:
        canvas = Canvas.from_cells(40, 20)
        assert (canvas.width, canvas.height) == (160, 160)
        assert canvas.size == (40, 20)

    def test_custom_char_pix(self) -> None:
        canvas = Canvas(100, 100, char_pix=(5, 10))
        assert canvas.size == (20, 10)

    def test_partial_cells_dropped(self) -> None:
        assert Canvas(7, 15).size == (1, 1)

    def test_starts_blank(self) -> None:
        canvas = Canvas.from_cells(3, 2)
        assert canvas.lines() == ["   ", "   "]

    def test_draw_and_clear(self) -> None:
        canvas = Canvas.from_cells(3, 2)
        canvas.draw_point(1, 1, "#")
        assert canvas.cell(1, 1) == "#"
        assert str(canvas) == "   \n # "
        canvas.clear()
        assert canvas.cell(1, 1) == BLANK

    def test_draw_out_of_bounds_ignored(self) -> None:
        canvas = Canvas.from_cells(2, 2)
        canvas.draw_point(5, 0, "#")
        canvas.draw_point(-1, 0, "#")
        assert "#" not in str(canvas)

    def test_iter_rows(self) -> None:
        assert len(list(Canvas.from_cells(4, 3))) == 3

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Canvas(-1, 10)

    def test_bad_char_pix_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Canvas(10, 10, char_pix=(0, 8))

    def test_repr(self) -> None:
        assert "40x20" in repr(Canvas.from_cells(40, 20))


# ---------------------------------------------------------------------------
# Character selection
# ---------------------------------------------------------------------------

class TestSelectCharacter:
    def test_darkest(self) -> None:
        assert select_character(0.0, " .:#") == " "

    def test_brightest(self) -> None:
        assert select_character(1.0, " .:#") == "#"

    def test_midpoint(self) -> None:
        assert select_character(0.5, DEFAULT_RAMP) == DEFAULT_RAMP[4]

    def test_clamped(self) -> None:
        assert select_character(-3.0, " .:#") == " "
        assert select_character(7.0, " .:#") == "#"

    def test_empty_ramp(self) -> None:
        assert select_character(0.5, "") == BLANK

    def test_monotonic(self) -> None:
        indices = [DEFAULT_RAMP.index(select_character(i / 50, DEFAULT_RAMP)) for i in range(51)]
        assert indices == sorted(indices)

    def test_miss_is_blank(self) -> None:
        globe = Globe(Texture.uniform(1.0))
        assert shade_cell(globe, None, DEFAULT_RAMP) == BLANK


class TestResolveRamp:
    def test_explicit_wins(self) -> None:
        globe = build_globe()
        assert resolve_ramp(globe, "ab") == "ab"

    def test_template_palette(self) -> None:
        globe = build_globe()
        expected = get_palette(SphereTemplate.EARTH.default_palette).ramp
        assert resolve_ramp(globe) == expected

    def test_default_without_template(self) -> None:
        assert resolve_ramp(Globe(Texture.uniform(0.5))) == DEFAULT_RAMP


# ---------------------------------------------------------------------------
# Rasterizing
# ---------------------------------------------------------------------------

class TestRasterize:
    def test_two_by_two_checkerboard_quadrants(self) -> None:
        # north-west and south-east squares are bright, the others half
        globe = Globe(Texture.from_rows([[1.0, 0.5], [0.5, 1.0]]))
        camera = Camera(CameraConfig(distance=2.0))
        canvas = rasterize(globe, camera, Canvas.from_cells(40, 20))

        # cells left of column 20 look west of lon 0, rows above 10 north of the equator
        assert canvas.cell(19, 9) == "@"
        assert canvas.cell(20, 9) == "="
        assert canvas.cell(19, 10) == "="
        assert canvas.cell(20, 10) == "@"

        for row in range(canvas.rows):
            for col in range(canvas.columns):
                ch = canvas.cell(col, row)
                if ch == BLANK:
                    continue
                bright = (col < 20) == (row < 10)
                assert ch == ("@" if bright else "="), (col, row)

    def test_checkerboard_matches_texture(self) -> None:
        globe = Globe(_checkerboard())
        camera = Camera(CameraConfig(distance=2.0))
        canvas = rasterize(globe, camera, Canvas.from_cells(40, 20))
        projector = SphereProjector.for_scene(globe, camera, canvas)

        centre = projector.cast(19, 9)
        assert centre is not None
        assert abs(centre.latitude) < 5.0
        assert abs(centre.longitude) < 5.0

        for row in range(canvas.rows):
            for col in range(canvas.columns):
                hit = projector.cast(col, row)
                if hit is None:
                    expected = BLANK
                else:
                    expected = select_character(
                        globe.day.sample(hit.latitude, hit.longitude), DEFAULT_RAMP
                    )
                assert canvas.cell(col, row) == expected, (col, row)

    def test_blank_outside_visible_disc(self) -> None:
        globe = Globe(_checkerboard())
        camera = Camera(CameraConfig(distance=2.0))
        canvas = rasterize(globe, camera, Canvas.from_cells(40, 20))
        projector = SphereProjector.for_scene(globe, camera, canvas)
        limit = math.asin(globe.radius / camera.distance)

        outside = 0
        for row in range(canvas.rows):
            for col in range(canvas.columns):
                d = projector.ray_direction(col, row)
                if math.acos(-d[2]) > limit + 1e-3:
                    outside += 1
                    assert canvas.cell(col, row) == BLANK
        assert outside > 0
        # the checkerboard has no zero samples, so the disc is fully drawn
        assert canvas.cell(19, 9) != BLANK

    def test_orbit_wraps_to_same_frame(self) -> None:
        globe = build_globe()
        frames = []
        for speed in (45.0, 405.0):
            camera = Camera(CameraConfig(orbit_speed=speed))
            camera.advance(1.0)
            frames.append(str(rasterize(globe, camera, Canvas.from_cells(40, 20))))
        assert frames[0] == frames[1]

    def test_uniform_texture_single_character(self) -> None:
        globe = Globe(Texture.uniform(0.6, 16, 8))
        canvas = rasterize(globe, Camera(), Canvas.from_cells(40, 20))
        drawn = {ch for line in canvas.lines() for ch in line if ch != BLANK}
        assert drawn == {select_character(0.6, DEFAULT_RAMP)}

    def test_deterministic(self) -> None:
        globe = build_globe()
        camera = Camera(CameraConfig(latitude=20.0, longitude=-60.0))
        first = str(rasterize(globe, camera, Canvas.from_cells(30, 15)))
        second = str(rasterize(globe, camera, Canvas.from_cells(30, 15)))
        assert first == second

    def test_overwrites_previous_frame(self) -> None:
        canvas = Canvas.from_cells(20, 10)
        canvas.draw_point(0, 0, "X")
        rasterize(Globe(Texture.uniform(0.6)), Camera(), canvas)
        assert canvas.cell(0, 0) == BLANK

    def test_zero_size_canvas(self) -> None:
        canvas = rasterize(build_globe(), Camera(), Canvas(0, 0))
        assert canvas.lines() == []

    def test_explicit_ramp(self) -> None:
        globe = Globe(Texture.uniform(1.0))
        canvas = rasterize(globe, Camera(), Canvas.from_cells(20, 10), ramp=" o")
        assert canvas.cell(9, 4) == "o"
