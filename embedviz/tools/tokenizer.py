# embedviz/tools/tokenizer.py
"""Token encode/decode helpers for the embedding model (tiktoken)."""

from functools import lru_cache
from typing import List

import tiktoken

from embedviz.core.config import settings

FALLBACK_ENCODING = "cl100k_base"


@lru_cache(maxsize=8)
def get_encoding(model: str) -> tiktoken.Encoding:
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        # non-OpenAI model ids (e.g. Ollama models) have no registered encoding
        return tiktoken.get_encoding(FALLBACK_ENCODING)


def to_tokens(text: str, model: str = settings.EMBEDDING_MODEL) -> List[int]:
    return get_encoding(model).encode(text, disallowed_special=())


def from_tokens(tokens: List[int], model: str = settings.EMBEDDING_MODEL) -> str:
    return get_encoding(model).decode(tokens)


def token_count(text: str, model: str = settings.EMBEDDING_MODEL) -> int:
    return len(to_tokens(text, model))
