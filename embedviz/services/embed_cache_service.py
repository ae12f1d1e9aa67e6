# embedviz/services/embed_cache_service.py
"""
Embedding cache service.

Usage:
    from embedviz.services.embed_cache_service import EmbedCacheService
    from embedviz.tools.embedder import get_embedder

    cache = EmbedCacheService(data_dir="./data")
    vec = await cache.resolve("hello world", get_embedder())

On a hit the stored vector is returned and the provider is never called.
On a miss the text is checked against the token ceiling, embedded, and the
vector is written once under the effective key.
"""

from __future__ import annotations
import asyncio
import inspect
import logging
from functools import partial
from typing import Callable, List, Optional, Sequence

import numpy as np

from embedviz.core.config import settings
from embedviz.core.exceptions import (
    DimensionMismatch,
    EmbedVizException,
    ProviderFailure,
    TokenLimitExceeded,
)
from embedviz.models.embedding_models import EmbeddingResult
from embedviz.services.similarity import cosine_similarity
from embedviz.tools.embed_cache import FileVectorStore, VectorStore, key_for_text
from embedviz.tools.tokenizer import token_count

logger = logging.getLogger("embedviz.cache")


class EmbedCacheService:
    def __init__(
        self,
        store: Optional[VectorStore] = None,
        data_dir: str = settings.DATA_DIR,
        dimension: Optional[int] = settings.EMBEDDING_SIZE,
        max_tokens: int = settings.MAX_TOKENS,
        model: str = settings.EMBEDDING_MODEL,
        key_length: int = settings.CACHE_KEY_LENGTH,
        provider: Optional[Callable] = None,
        token_counter: Optional[Callable[[str], int]] = None,
    ):
        self.dimension = dimension
        self.store = store if store is not None else FileVectorStore(data_dir, dimension=dimension)
        self.max_tokens = max_tokens
        self.model = model
        self.key_length = key_length
        self.provider = provider
        self.token_counter = token_counter or partial(token_count, model=model)

    def effective_key(self, text: str, key: Optional[str] = None, cache: bool = True) -> Optional[str]:
        """Explicit key if given, else derived from the text; None means do not cache."""
        if not cache:
            return None
        if key is None:
            key = key_for_text(text, self.key_length)
        return key or None

    # -------------------------
    # Provider call
    # -------------------------
    async def _embed(self, provider: Callable, text: str) -> np.ndarray:
        try:
            if inspect.iscoroutinefunction(provider):
                out = await provider(text)
            else:
                out = await asyncio.to_thread(provider, text)
                if inspect.isawaitable(out):
                    out = await out
        except EmbedVizException:
            raise
        except Exception as e:
            raise ProviderFailure(f"embedding provider failed: {e}") from e

        if isinstance(out, EmbeddingResult):
            if out.usage is not None:
                logger.info("Embedded %r: prompt_tokens=%d total_tokens=%d",
                            text[:40], out.usage.prompt_tokens, out.usage.total_tokens)
            out = out.vector

        vector = np.asarray(out, dtype=np.float32).ravel()
        if self.dimension is not None and vector.size != self.dimension:
            raise DimensionMismatch(self.dimension, vector.size)
        return vector

    # -------------------------
    # Single resolution
    # -------------------------
    async def resolve(
        self,
        text: str,
        provider: Optional[Callable] = None,
        key: Optional[str] = None,
        cache: bool = True,
    ) -> np.ndarray:
        """
        Return the vector for `text`, from the store when cached.

        `key` overrides the derived cache key; `cache=False` skips the store
        entirely (nothing is read or written).
        """
        provider = provider or self.provider
        if provider is None:
            raise ValueError("no embedding provider given")

        name = self.effective_key(text, key, cache)
        if name:
            vector = await asyncio.to_thread(self.store.get, name)
            if vector is not None:
                logger.debug("Cache hit for key %r", name)
                return vector

        n_tokens = self.token_counter(text)
        if n_tokens > self.max_tokens:
            raise TokenLimitExceeded(n_tokens, self.max_tokens)

        logger.info("Cache miss for key %r, calling provider", name)
        vector = await self._embed(provider, text)

        if name:
            await asyncio.to_thread(self.store.put, name, vector)
        return vector

    # -------------------------
    # Batch resolution
    # -------------------------
    async def resolve_many(
        self,
        texts: Sequence[str],
        provider: Optional[Callable] = None,
        keys: Optional[Sequence[Optional[str]]] = None,
        cache: bool = True,
    ) -> List[np.ndarray]:
        """
        Resolve every text concurrently, results aligned to `texts`.
        Texts that share an effective key are resolved once.
        """
        if keys is not None and len(keys) != len(texts):
            raise ValueError("texts and keys length mismatch")
        keys = keys if keys is not None else [None] * len(texts)

        pending = {}
        futures = []
        for text, key in zip(texts, keys):
            name = self.effective_key(text, key, cache)
            if name is None:
                fut = asyncio.ensure_future(self.resolve(text, provider, cache=False))
            elif name in pending:
                fut = pending[name]
            else:
                fut = pending[name] = asyncio.ensure_future(self.resolve(text, provider, key=name))
            futures.append(fut)

        try:
            return list(await asyncio.gather(*futures))
        except BaseException:
            for fut in futures:
                fut.cancel()
            raise

    # -------------------------
    # Utility
    # -------------------------
    async def compare_texts(
        self,
        text1: str,
        text2: str,
        provider: Optional[Callable] = None,
        name: Optional[str] = None,
    ) -> float:
        """
        Cosine similarity of two texts. With `name` the vectors are cached
        as `<name>_1` / `<name>_2`; without it nothing is cached.
        """
        cache = name is not None
        vec1 = await self.resolve(text1, provider, key=f"{name}_1" if cache else None, cache=cache)
        vec2 = await self.resolve(text2, provider, key=f"{name}_2" if cache else None, cache=cache)
        return cosine_similarity(vec1, vec2)
