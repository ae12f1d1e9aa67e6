# embedviz/services/similarity.py

import numpy as np

from embedviz.core.exceptions import DegenerateVector, DimensionMismatch


def cosine_similarity(vec1, vec2) -> float:
    """
    Compute cosine similarity between two vectors, in [-1, 1].

    Raises DimensionMismatch for vectors of different length and
    DegenerateVector when either vector has zero norm.
    """
    v1 = np.asarray(vec1, dtype=np.float64).ravel()
    v2 = np.asarray(vec2, dtype=np.float64).ravel()
    if v1.size != v2.size:
        raise DimensionMismatch(v1.size, v2.size)

    norm_v1 = np.linalg.norm(v1)
    norm_v2 = np.linalg.norm(v2)
    if norm_v1 == 0 or norm_v2 == 0:
        raise DegenerateVector(
            "One of the vectors is zero-length; cannot compute cosine similarity."
        )

    score = float(np.dot(v1, v2) / (norm_v1 * norm_v2))
    # rounding can push |score| a hair past 1
    return max(-1.0, min(1.0, score))
