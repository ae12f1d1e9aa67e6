"""
Tests for the chart renderer.

Core claims:
- a constant axis maps every point to the middle of the drawable range
- line mode places points by index and draws dots over the segments
- render writes a decodable image and returns the same bytes
"""

import io

import numpy as np
import pytest
from PIL import Image
from pydantic import ValidationError

from embedviz.models.graph_models import GraphConfig, Point2D
from embedviz.services.graph_service import map_points, range_to_range, rasterize, render


def _has_ink(image, box):
    """True if the box holds near-black (text) pixels."""
    region = np.asarray(image.crop(tuple(round(v) for v in box)))
    return bool((region < 100).all(axis=-1).any())


class TestRangeToRange:

    def test_linear(self):
        assert range_to_range(5, 0, 100, 10, 200) == 150
        assert range_to_range(0, 0, 100, 10, 200) == 100
        assert range_to_range(10, 0, 100, 10, 200) == 200

    def test_empty_source_range_maps_to_midpoint(self):
        assert range_to_range(3, 3, 20, 3, 360) == 190


class TestMapPoints:

    def test_constant_y_maps_to_vertical_midpoint(self):
        config = GraphConfig()
        points = [(0, 1.5), (1, 1.5), (2, 1.5)]
        pad = config.padding
        mid = (pad + (config.height - 2 * pad)) / 2 * config.scale
        for _, y in map_points(points, config):
            assert y == pytest.approx(mid)

    def test_single_point(self):
        config = GraphConfig(scale=1)
        [(x, y)] = map_points([(4.0, -2.0)], config)
        assert x == pytest.approx((20 + 560) / 2)
        assert y == pytest.approx((20 + 360) / 2)

    def test_scatter_extremes_hit_padded_bounds(self):
        config = GraphConfig(scale=2)
        (x0, y0), (x1, y1) = map_points([(-1, -1), (1, 1)], config)
        assert (x0, y0) == (20 * 2, 20 * 2)
        assert (x1, y1) == ((600 - 40) * 2, (400 - 40) * 2)

    def test_line_mode_uses_index_for_x(self):
        config = GraphConfig(type="line", scale=1)
        pixels = map_points([(100, 0), (-5, 1), (7, 2), (0, 3)], config)
        xs = [x for x, _ in pixels]
        assert xs == [range_to_range(i, 0, 20, 4, 560) for i in range(4)]

    def test_empty(self):
        assert map_points([], GraphConfig()) == []


class TestRasterize:

    def test_canvas_is_supersampled(self):
        image = rasterize([(0, 0), (1, 1), (2, 0)], GraphConfig(scale=3))
        assert image.size == (1800, 1200)

    def test_line_dots_drawn_over_segments(self):
        config = GraphConfig(type="line", color="#ff0000", scale=2)
        points = [(0, 0), (0, 1), (0, 0), (0, 1)]
        image = rasterize(points, config)
        for x, y in map_points(points, config):
            assert image.getpixel((round(x), round(y))) == (255, 0, 0)

    def test_point_color_overrides_default(self):
        config = GraphConfig(scale=1)
        points = [Point2D(0, 0, "#00ff00"), Point2D(1, 1), Point2D(2, 0)]
        image = rasterize(points, config)
        x, y = map_points(points, config)[0]
        r, g, b = image.getpixel((round(x), round(y)))
        assert g > 200 and r < 100 and b < 100

    def test_short_label_drawn_right_of_point(self):
        config = GraphConfig(scale=2)
        points = [Point2D(0, 0, None, "cat"), Point2D(1, 1)]
        image = rasterize(points, config)
        x, y = map_points(points, config)[0]
        offset = (config.radius + 2) * config.scale
        assert _has_ink(image, (x + offset, y - 12, x + offset + 50, y + 12))
        assert not _has_ink(image, (x - 20, 0, x + 20, y - offset))

    def test_long_label_at_right_edge_moves_above_point(self):
        config = GraphConfig(scale=2)
        points = [Point2D(0, 0), Point2D(1, 1, None, "a very long label at the right edge")]
        image = rasterize(points, config)
        x, y = map_points(points, config)[1]
        offset = (config.radius + 2) * config.scale
        assert _has_ink(image, (x - 60, y - offset - 36, x + 60, y - offset))
        assert not _has_ink(image, (x + offset, y - offset + 4, 1200, y + 20))

    def test_header_drawn_over_points(self):
        config = GraphConfig(header="HHHH", color="#ff0000", radius=20, scale=2)
        points = [(0, 0), (1, 1)]
        image = rasterize(points, config)
        origin = config.padding * config.scale
        assert map_points(points, config)[0] == (origin, origin)
        # the dot covers the header origin, the glyphs still show in black
        r, g, _ = image.getpixel((origin - 35, origin))
        assert r > 200 and g < 100
        assert _has_ink(image, (origin, origin, origin + 40, origin + 40))

    def test_empty_chart_is_background(self):
        image = rasterize([], GraphConfig(background="#123456", scale=1))
        assert image.getpixel((300, 200)) == (0x12, 0x34, 0x56)


class TestRender:

    def test_writes_jpeg(self, tmp_path):
        filename, buffer = render([(0, 0), (1, 2), (2, 1)], GraphConfig(), data_dir=tmp_path)
        assert filename == tmp_path / "test.jpg"
        assert filename.read_bytes() == buffer
        assert Image.open(io.BytesIO(buffer)).format == "JPEG"

    def test_format_from_extension(self, tmp_path):
        _, buffer = render([(0, 0), (1, 2), (2, 1)], GraphConfig(name="chart.png"), data_dir=tmp_path)
        assert Image.open(io.BytesIO(buffer)).format == "PNG"

    def test_creates_output_directory(self, tmp_path):
        out = tmp_path / "charts"
        filename, _ = render([(0, 0), (1, 1)], GraphConfig(type="line"), data_dir=out)
        assert filename.parent == out and filename.exists()

    def test_constant_values_render(self, tmp_path):
        filename, buffer = render([(1, 1), (1, 1), (1, 1)], data_dir=tmp_path)
        assert len(buffer) > 0


class TestGraphConfig:

    def test_defaults(self):
        config = GraphConfig()
        assert (config.width, config.height, config.scale) == (600, 400, 2)
        assert config.chart_type == "scatter"
        assert config.name == "test.jpg"
        assert (config.background, config.color, config.radius) == ("#ffffff", "#005379", 5)
        assert config.header is None

    def test_type_alias(self):
        assert GraphConfig(type="line").chart_type == "line"
        assert GraphConfig(chart_type="line").chart_type == "line"

    def test_rejects_unknown_chart_type(self):
        with pytest.raises(ValidationError):
            GraphConfig(type="pie")

    def test_rejects_bad_color(self):
        with pytest.raises(ValidationError):
            GraphConfig(color="not-a-color")

    def test_rejects_path_in_name(self):
        with pytest.raises(ValidationError):
            GraphConfig(name="../escape.jpg")
