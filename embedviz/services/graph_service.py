# embedviz/services/graph_service.py
"""
Scatter / line chart rasterizer.

Points are mapped linearly from data space into the padded canvas and the
whole chart is drawn at `scale` times the nominal size.
"""

import io
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from embedviz.core.config import settings
from embedviz.core.exceptions import IOFailure
from embedviz.models.graph_models import GraphConfig, Point2D, RenderResult

logger = logging.getLogger("embedviz.graph")

TEXT_COLOR = "#000000"
LINE_COLOR = "#000000"
LABEL_FONT_SIZE = 12
HEADER_FONT_SIZE = 20
SCATTER_ALPHA = 0.8
DEFAULT_FORMAT = "JPEG"


def range_to_range(value: float, from_min: float, to_min: float, from_max: float, to_max: float) -> float:
    """
    Linearly map `value` from [from_min, from_max] onto [to_min, to_max].
    An empty source range maps everything to the middle of the target range.
    """
    if from_max == from_min:
        return (to_min + to_max) / 2
    return (value - from_min) * (to_max - to_min) / (from_max - from_min) + to_min


def _as_point(p) -> Point2D:
    if isinstance(p, Point2D):
        return p
    return Point2D(*p)


def map_points(points: Sequence, config: GraphConfig) -> List[Tuple[float, float]]:
    """
    Canvas pixel position for every point, in input order.

    In line mode the x position comes from the point's index, not its x value.
    """
    pts = [_as_point(p) for p in points]
    if not pts:
        return []

    pad = config.padding
    x_range = (pad, config.width - pad * 2)
    y_range = (pad, config.height - pad * 2)
    xs = [p.x for p in pts]
    ys = [p.y for p in pts]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    mapped = []
    for i, p in enumerate(pts):
        if config.chart_type == "line":
            x = range_to_range(i, 0, x_range[0], len(pts), x_range[1])
        else:
            x = range_to_range(p.x, min_x, x_range[0], max_x, x_range[1])
        y = range_to_range(p.y, min_y, y_range[0], max_y, y_range[1])
        mapped.append((x * config.scale, y * config.scale))
    return mapped


@lru_cache(maxsize=16)
def _font(size: int):
    return ImageFont.load_default(size=size)


def _rgba(color: str, alpha: float = 1.0) -> Tuple[int, int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return r, g, b, round(255 * alpha)


def _dot(draw: ImageDraw.ImageDraw, center, radius: float, fill) -> None:
    x, y = center
    draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=fill)


def _draw_label(draw: ImageDraw.ImageDraw, text: str, center, config: GraphConfig, canvas_width: int) -> None:
    font = _font(max(1, round(LABEL_FONT_SIZE * config.scale)))
    text_width = draw.textlength(text, font=font)
    offset = (config.radius + 2) * config.scale

    x, y = center[0] + offset, center[1]
    anchor = "lm"
    if x + text_width >= canvas_width:
        # no room on the right: center it above the point
        x = center[0] - text_width / 2
        y = center[1] - offset
        anchor = "ld"
    draw.text((x, y), text, fill=_rgba(TEXT_COLOR), font=font, anchor=anchor)


def _draw_scatter(draw, points: List[Point2D], pixels, config: GraphConfig, canvas_width: int) -> None:
    radius = config.radius * config.scale
    for p, center in zip(points, pixels):
        _dot(draw, center, radius, _rgba(p.color or config.color, SCATTER_ALPHA))
        if p.label:
            _draw_label(draw, p.label, center, config, canvas_width)


def _draw_line_segments(draw, pixels, config: GraphConfig) -> None:
    width = max(1, round(config.radius * 0.75 * config.scale))
    for start, end in zip(pixels, pixels[1:]):
        draw.line([start, end], fill=_rgba(LINE_COLOR), width=width)


def _draw_line_dots(draw, points: List[Point2D], pixels, config: GraphConfig) -> None:
    radius = config.radius * config.scale
    for p, center in zip(points, pixels):
        _dot(draw, center, radius, _rgba(p.color or config.color))


def _image_format(name: str) -> str:
    return Image.registered_extensions().get(Path(name).suffix.lower(), DEFAULT_FORMAT)


def rasterize(points: Iterable, config: Optional[GraphConfig] = None) -> Image.Image:
    """Draw the chart in memory."""
    config = config or GraphConfig()
    pts = [_as_point(p) for p in points]
    width, height = config.canvas_size()

    image = Image.new("RGB", (width, height), ImageColor.getrgb(config.background)[:3])
    draw = ImageDraw.Draw(image, "RGBA")
    pixels = map_points(pts, config)

    if config.chart_type == "scatter":
        _draw_scatter(draw, pts, pixels, config, width)
    else:
        # segments first, dots second: dots always sit on top of the lines
        _draw_line_segments(draw, pixels, config)
        _draw_line_dots(draw, pts, pixels, config)

    if config.header:
        font = _font(max(1, round(HEADER_FONT_SIZE * config.scale)))
        origin = config.padding * config.scale
        draw.text((origin, origin), config.header, fill=_rgba(TEXT_COLOR), font=font, anchor="la")

    return image


def encode(image: Image.Image, name: str) -> bytes:
    fmt = _image_format(name)
    buf = io.BytesIO()
    if fmt == "JPEG":
        image.convert("RGB").save(buf, format=fmt, quality=90)
    else:
        image.save(buf, format=fmt)
    return buf.getvalue()


def render(points: Iterable, config: Optional[GraphConfig] = None, data_dir=settings.DATA_DIR) -> RenderResult:
    """
    Rasterize `points` and write the encoded image to `data_dir/config.name`.
    Returns the written path and the encoded bytes.
    """
    config = config or GraphConfig()
    pts = [_as_point(p) for p in points]
    buffer = encode(rasterize(pts, config), config.name)

    filename = Path(data_dir) / config.name
    try:
        filename.parent.mkdir(parents=True, exist_ok=True)
        filename.write_bytes(buffer)
    except OSError as e:
        raise IOFailure(f"failed to write {filename}: {e}") from e

    logger.info("Rendered %s chart with %d points to %s (%d bytes)",
                config.chart_type, len(pts), filename, len(buffer))
    return RenderResult(filename, buffer)
