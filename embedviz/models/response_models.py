# embedviz/models/response_models.py

from __future__ import annotations
from pydantic import BaseModel
from typing import Optional, List


class EmbedResponse(BaseModel):
    text: str
    key: Optional[str] = None
    cached: bool = False
    dimension: int
    vector: Optional[List[float]] = None


class SimilarityResponse(BaseModel):
    text1: str
    text2: str
    score: float


class GraphResponse(BaseModel):
    filename: str
    num_points: int
    size_bytes: int
