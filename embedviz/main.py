import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException

# --- Core Imports ---
from embedviz.core.config import settings
from embedviz.core.logger import setup_logging
from embedviz.core.exceptions import (
    DegenerateVector,
    DimensionMismatch,
    EmbedVizException,
    InsufficientSamples,
    ProviderFailure,
    TokenLimitExceeded,
)

# --- Services ---
from embedviz.services.embed_cache_service import EmbedCacheService
from embedviz.services.projection import embeddings_to_graph
from embedviz.tools.embedder import get_embedder

# --- Models ---
from embedviz.models.graph_models import Point2D
from embedviz.models.request_models import EmbedRequest, GraphRequest, SimilarityRequest
from embedviz.models.response_models import EmbedResponse, GraphResponse, SimilarityResponse

# ------------------------------
# Setup
# ------------------------------
setup_logging()
logger = logging.getLogger("embedviz.api")

APP = FastAPI(title=settings.API_TITLE, version=settings.API_VERSION, debug=settings.DEBUG)

# Global Service Instance
cache_service: Optional[EmbedCacheService] = None


@APP.on_event("startup")
def startup_event():
    """
    Build the provider and cache service from settings.
    """
    global cache_service

    logger.info("Starting embedviz service...")
    try:
        provider = get_embedder()
        cache_service = EmbedCacheService(data_dir=settings.DATA_DIR, provider=provider)
        logger.info(f"EmbedCacheService initialized: {settings.DATA_DIR} ({settings.EMBEDDING_PROVIDER})")
    except EmbedVizException as e:
        logger.exception(f"Failed to init EmbedCacheService: {e}")


def _require_service() -> EmbedCacheService:
    if not cache_service:
        raise HTTPException(status_code=503, detail="Embedding cache not initialized")
    return cache_service


def _http_error(e: EmbedVizException) -> HTTPException:
    if isinstance(e, (TokenLimitExceeded, DimensionMismatch, DegenerateVector, InsufficientSamples)):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ProviderFailure):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@APP.get("/health")
def health():
    return {
        "status": "ok",
        "cache": bool(cache_service),
        "data_dir": settings.DATA_DIR,
    }


# ------------------------------
# Endpoints
# ------------------------------

@APP.post("/embed", response_model=EmbedResponse)
async def embed_endpoint(req: EmbedRequest):
    service = _require_service()
    key = service.effective_key(req.text, req.key, req.cache)
    try:
        cached = bool(key) and await asyncio.to_thread(service.store.contains, key)
        vector = await service.resolve(req.text, key=req.key, cache=req.cache)
    except EmbedVizException as e:
        logger.exception("Embed failed")
        raise _http_error(e)

    return EmbedResponse(
        text=req.text,
        key=key,
        cached=cached,
        dimension=int(vector.size),
        vector=vector.tolist() if req.include_vector else None,
    )


@APP.post("/similarity", response_model=SimilarityResponse)
async def similarity_endpoint(req: SimilarityRequest):
    service = _require_service()
    try:
        score = await service.compare_texts(req.text1, req.text2, name=req.name)
    except EmbedVizException as e:
        logger.exception("Similarity failed")
        raise _http_error(e)
    return SimilarityResponse(text1=req.text1, text2=req.text2, score=score)


@APP.post("/graph", response_model=GraphResponse)
async def graph_endpoint(req: GraphRequest):
    service = _require_service()

    def label(point: Point2D, i: int) -> Point2D:
        return point._replace(label=req.texts[i]) if req.labels else point

    try:
        vectors = await service.resolve_many(req.texts)
        filename, buffer = await embeddings_to_graph(vectors, req.config, on_each=label, data_dir=settings.DATA_DIR)
    except EmbedVizException as e:
        logger.exception("Graph failed")
        raise _http_error(e)

    return GraphResponse(filename=str(filename), num_points=len(vectors), size_bytes=len(buffer))
