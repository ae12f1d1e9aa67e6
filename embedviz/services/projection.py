# embedviz/services/projection.py
"""
PCA projection of embedding batches down to 2 or 3 dimensions.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from embedviz.core.config import settings
from embedviz.core.exceptions import DimensionMismatch, InsufficientSamples
from embedviz.models.graph_models import GraphConfig, Point2D, RenderResult
from embedviz.services.graph_service import render

logger = logging.getLogger("embedviz.projection")


def _as_matrix(vectors: Sequence) -> np.ndarray:
    rows = [np.asarray(v, dtype=np.float64).ravel() for v in vectors]
    if not rows:
        return np.empty((0, 0), dtype=np.float64)
    dim = rows[0].size
    for row in rows[1:]:
        if row.size != dim:
            raise DimensionMismatch(dim, row.size)
    return np.vstack(rows)


def project(vectors: Sequence, dimensions: int = 2) -> List[Tuple[float, ...]]:
    """
    Fit PCA on the whole batch and return one coordinate tuple per vector,
    in input order.

    The data is mean-centered (not scaled) and projected onto the top
    `dimensions` right singular vectors. Each axis is oriented so its
    largest loading is positive; orientation may still differ between
    calls on different batches.
    """
    if dimensions not in (2, 3):
        raise ValueError(f"dimensions must be 2 or 3, got {dimensions}")

    X = _as_matrix(vectors)
    n_samples = X.shape[0]
    if n_samples < dimensions + 1:
        raise InsufficientSamples(n_samples, dimensions + 1)
    if X.shape[1] < dimensions:
        raise DimensionMismatch(dimensions, X.shape[1])

    centered = X - X.mean(axis=0)
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    components = vt[:dimensions]

    signs = np.sign(components[np.arange(dimensions), np.argmax(np.abs(components), axis=1)])
    signs[signs == 0] = 1
    components = components * signs[:, None]

    coords = centered @ components.T
    logger.debug("Projected %d vectors of dim %d to %dD", n_samples, X.shape[1], dimensions)
    return [tuple(float(c) for c in row) for row in coords]


async def embeddings_to_graph(
    vectors: Sequence,
    config: Optional[GraphConfig] = None,
    on_each: Optional[Callable[[Point2D, int], Point2D]] = None,
    data_dir=None,
) -> RenderResult:
    """
    Project `vectors` to 2-D and render them. `on_each(point, index)` can
    decorate each point (color, label) before drawing.
    """
    points = [Point2D(x, y) for x, y in project(vectors, 2)]
    if on_each is not None:
        points = [on_each(p, i) for i, p in enumerate(points)]
    return await asyncio.to_thread(render, points, config, data_dir or settings.DATA_DIR)
