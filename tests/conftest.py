"""Shared fixtures: a deterministic stub provider and small-dimension services."""

import numpy as np
import pytest

from embedviz.models.embedding_models import EmbeddingResult, Usage
from embedviz.services.embed_cache_service import EmbedCacheService

DIM = 8

STUB_VECTORS = {
    "cat": [1.0, 0.9, 0.1, 0.0, 0.2, 0.0, 0.0, 0.1],
    "dog": [0.9, 1.0, 0.2, 0.0, 0.1, 0.0, 0.1, 0.0],
    "car": [0.0, 0.1, 1.0, 0.9, 0.0, 0.3, 0.0, 0.0],
}


class StubProvider:
    """Returns fixed vectors for known words, a seeded random vector otherwise."""

    def __init__(self, dim: int = DIM):
        self.dim = dim
        self.calls = []

    def __call__(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        if text in STUB_VECTORS:
            vector = STUB_VECTORS[text]
        else:
            seed = sum(map(ord, text))
            vector = np.random.default_rng(seed).standard_normal(self.dim).tolist()
        n = len(text.split())
        return EmbeddingResult(vector=vector, usage=Usage(prompt_tokens=n, total_tokens=n))


def word_count(text: str) -> int:
    return len(text.split())


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def service(tmp_path):
    return EmbedCacheService(
        data_dir=str(tmp_path),
        dimension=DIM,
        max_tokens=5,
        token_counter=word_count,
    )
