# embedviz/models/request_models.py

from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from embedviz.models.graph_models import GraphConfig
from embedviz.tools.embed_cache import check_key


# ------------------------------
# Single text embedding
# ------------------------------
class EmbedRequest(BaseModel):
    """
    Request schema for /embed.
    `key` overrides the derived cache key; `cache=False` bypasses the cache.
    """
    text: str = Field(min_length=1)
    key: Optional[str] = None
    cache: bool = True
    include_vector: bool = False

    @field_validator("key")
    @classmethod
    def _check_key(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else check_key(value)


# ------------------------------
# Similarity of two texts
# ------------------------------
class SimilarityRequest(BaseModel):
    text1: str = Field(min_length=1)
    text2: str = Field(min_length=1)
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else check_key(value)


# ------------------------------
# Embed a list of texts and plot them
# ------------------------------
class GraphRequest(BaseModel):
    """
    Request schema for /graph. Texts are embedded, projected to 2-D and
    rendered; with `labels` each point is tagged with its text.
    """
    texts: List[str] = Field(min_length=3)
    labels: bool = True
    config: GraphConfig = Field(default_factory=GraphConfig)
