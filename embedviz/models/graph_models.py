# embedviz/models/graph_models.py

from __future__ import annotations
from pathlib import Path
from typing import Literal, NamedTuple, Optional

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Point2D(NamedTuple):
    """A projected point; color and label fall back to the chart defaults."""
    x: float
    y: float
    color: Optional[str] = None
    label: Optional[str] = None


class RenderResult(NamedTuple):
    filename: Path
    buffer: bytes


# ------------------------------
# Chart configuration
# ------------------------------
class GraphConfig(BaseModel):
    """
    Options for `render`. Unset fields keep their defaults.
    `type` is accepted as an alias of `chart_type`.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    width: int = Field(default=600, gt=0)
    height: int = Field(default=400, gt=0)
    scale: float = Field(default=2, gt=0)
    chart_type: Literal["scatter", "line"] = Field(default="scatter", alias="type")
    header: Optional[str] = None
    name: str = "test.jpg"
    background: str = "#ffffff"
    color: str = "#005379"
    radius: float = Field(default=5, ge=0)
    padding: int = Field(default=20, ge=0)

    @field_validator("background", "color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        try:
            ImageColor.getrgb(value)
        except ValueError as e:
            raise ValueError(f"unrecognised color {value!r}") from e
        return value

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value or Path(value).name != value:
            raise ValueError("name must be a plain file name")
        return value

    def canvas_size(self) -> tuple[int, int]:
        return round(self.width * self.scale), round(self.height * self.scale)
