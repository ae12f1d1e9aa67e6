# embedviz/models/embedding_models.py

from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional


class Usage(BaseModel):
    """Token accounting reported by the provider."""
    prompt_tokens: int = 0
    total_tokens: int = 0


class EmbeddingResult(BaseModel):
    """
    What an embedding provider returns for one text.
    """
    vector: List[float]
    usage: Optional[Usage] = None
    model: Optional[str] = None

    @property
    def dimension(self) -> int:
        return len(self.vector)
