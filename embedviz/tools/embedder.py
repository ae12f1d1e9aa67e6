# embedviz/tools/embedder.py
"""
Embedding providers.

A provider is any callable `text -> EmbeddingResult` (or an awaitable of
one). The cache service only calls it on a miss and never retries it.
"""

import logging
from typing import Optional

import requests
from openai import OpenAI
from requests.adapters import HTTPAdapter, Retry

from embedviz.core.config import settings
from embedviz.core.exceptions import ConfigurationError, ProviderFailure
from embedviz.models.embedding_models import EmbeddingResult, Usage

logger = logging.getLogger("embedviz.embedder")


class OpenAIEmbedder:
    """
    OpenAI embeddings endpoint, one text per request.
    """

    def __init__(self, model=None, api_key=None, timeout=None, client: Optional[OpenAI] = None):
        self.model = model or settings.EMBEDDING_MODEL
        if client is None:
            api_key = api_key or settings.OPENAI_API_KEY
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY is not set")
            client = OpenAI(api_key=api_key, timeout=timeout or settings.PROVIDER_TIMEOUT)
        self.client = client

    def embed(self, text: str) -> EmbeddingResult:
        try:
            response = self.client.embeddings.create(model=self.model, input=text)
        except Exception as e:
            logger.error("OpenAI embedding failed (model=%s): %s", self.model, e)
            raise ProviderFailure(f"OpenAI embedding failed: {e}") from e

        usage = None
        if response.usage is not None:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens,
                total_tokens=response.usage.total_tokens,
            )
        return EmbeddingResult(vector=response.data[0].embedding, usage=usage, model=self.model)

    __call__ = embed


class OllamaEmbedder:
    """
    Ollama-backed embedder (supports only one text at a time).
    Uses /api/embeddings with the 'prompt' field.
    """

    def __init__(self, base_url=None, model=None, timeout=None):
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or settings.EMBEDDING_MODEL
        self.timeout = timeout or settings.PROVIDER_TIMEOUT

        self.session = requests.Session()
        retries = Retry(total=3, backoff_factor=0.5, status_forcelist=[429, 500, 502, 503, 504])
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def embed(self, text: str) -> EmbeddingResult:
        url = f"{self.base_url}/api/embeddings"
        payload = {
            "model": self.model,
            "prompt": text  # must be 'prompt', NOT 'input'
        }

        try:
            r = self.session.post(url, json=payload, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Ollama embedding failed (model=%s): %s", self.model, e)
            raise ProviderFailure(f"Ollama embedding failed: {e}") from e

        # Possible shapes:
        # 1) {"embedding": [numbers]}
        # 2) {"embeddings": [[...]]}
        if isinstance(data, dict) and data.get("embedding"):
            vector = data["embedding"]
        elif isinstance(data, dict) and data.get("embeddings"):
            vector = data["embeddings"][0]
        else:
            raise ProviderFailure("Unknown embedding response format from Ollama")

        usage = None
        if isinstance(data.get("prompt_eval_count"), int):
            usage = Usage(prompt_tokens=data["prompt_eval_count"], total_tokens=data["prompt_eval_count"])
        return EmbeddingResult(vector=vector, usage=usage, model=self.model)

    __call__ = embed


def get_embedder(provider: Optional[str] = None, **kwargs):
    """Build the provider named by `provider` (or EMBEDDING_PROVIDER)."""
    name = (provider or settings.EMBEDDING_PROVIDER).lower()
    if name == "openai":
        return OpenAIEmbedder(**kwargs)
    if name == "ollama":
        return OllamaEmbedder(**kwargs)
    raise ConfigurationError(f"Unknown embedding provider: {name!r}")
