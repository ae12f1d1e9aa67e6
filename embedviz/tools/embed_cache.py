# embedviz/tools/embed_cache.py
"""
Write-once vector stores.

A cache entry is the raw little-endian float32 array of one vector, stored
under `<key>.dat` in the data directory. Entries are created on the first
miss for a key and trusted afterwards; nothing here updates or deletes them.
"""

import os
import re
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from embedviz.core.config import settings
from embedviz.core.exceptions import CorruptEntry, DimensionMismatch, IOFailure

logger = logging.getLogger("embedviz.cache")

ENTRY_SUFFIX = ".dat"
FLOAT_DTYPE = np.dtype("<f4")

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[/\\]")


def key_for_text(text: str, length: int = settings.CACHE_KEY_LENGTH) -> str:
    """
    Whitespace runs become one underscore, then lower-case, then cut to `length`.

    Distinct texts sharing the same prefix map to the same key and therefore
    to the same cached vector.
    """
    key = _WHITESPACE.sub("_", text)
    key = _SEPARATORS.sub("_", key)
    return key.lower()[:length]


def check_key(key: str) -> str:
    """Reject keys that are empty or contain a path separator."""
    if not key or _SEPARATORS.search(key):
        raise ValueError(f"invalid cache key: {key!r}")
    return key


def _as_vector(vector) -> np.ndarray:
    arr = np.asarray(vector, dtype=FLOAT_DTYPE)
    if arr.ndim != 1:
        raise ValueError(f"expected a 1-D vector, got shape {arr.shape}")
    return arr


class VectorStore(ABC):
    """
    Narrow key -> vector interface used by the cache service.
    """

    def __init__(self, dimension: Optional[int] = None):
        self.dimension = dimension

    @abstractmethod
    def get(self, key: str) -> Optional[np.ndarray]:
        """Return the stored vector for `key`, or None when absent."""

    @abstractmethod
    def put(self, key: str, vector) -> bool:
        """Store `vector` under `key` unless an entry exists. Returns True if written."""

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def _check_dimension(self, arr: np.ndarray) -> None:
        if self.dimension is not None and arr.size != self.dimension:
            raise DimensionMismatch(self.dimension, arr.size)

    def _unpack_vector(self, buf: bytes, where) -> np.ndarray:
        size = len(buf)
        if size == 0:
            raise CorruptEntry(where, size, "empty entry")
        if size % FLOAT_DTYPE.itemsize:
            raise CorruptEntry(where, size, f"not a multiple of {FLOAT_DTYPE.itemsize}")
        arr = np.frombuffer(buf, dtype=FLOAT_DTYPE).astype(np.float32)
        if self.dimension is not None and arr.size != self.dimension:
            raise CorruptEntry(where, size, f"holds {arr.size} floats, expected {self.dimension}")
        return arr


class FileVectorStore(VectorStore):
    """One `<key>.dat` file per entry under `root`."""

    def __init__(self, root=settings.DATA_DIR, dimension: Optional[int] = None):
        super().__init__(dimension)
        self.root = Path(root)

    def path_for_key(self, key: str) -> Path:
        check_key(key)
        return self.root / f"{key}{ENTRY_SUFFIX}"

    def get(self, key: str) -> Optional[np.ndarray]:
        p = self.path_for_key(key)
        try:
            buf = p.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise IOFailure(f"failed to read {p}: {e}") from e
        return self._unpack_vector(buf, p)

    def put(self, key: str, vector) -> bool:
        p = self.path_for_key(key)
        arr = _as_vector(vector)
        self._check_dimension(arr)

        if p.exists():
            logger.debug("Cache entry %s already exists, leaving it untouched", p)
            return False

        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            # write next to the target then rename, so readers never see half an entry
            with tempfile.NamedTemporaryFile("wb", delete=False, dir=str(p.parent), suffix=".tmp") as tf:
                tf.write(arr.tobytes())
                tmpname = tf.name
            os.replace(tmpname, p)
        except OSError as e:
            raise IOFailure(f"failed to write {p}: {e}") from e

        logger.info("Cached %d-d vector at %s", arr.size, p)
        return True


class MemoryVectorStore(VectorStore):
    """Dict-backed store with the same byte-level contract, for tests and throwaway runs."""

    def __init__(self, dimension: Optional[int] = None):
        super().__init__(dimension)
        self._entries: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[np.ndarray]:
        buf = self._entries.get(key)
        if buf is None:
            return None
        return self._unpack_vector(buf, key)

    def put(self, key: str, vector) -> bool:
        arr = _as_vector(vector)
        self._check_dimension(arr)
        if key in self._entries:
            return False
        self._entries[key] = arr.tobytes()
        return True

    def __len__(self) -> int:
        return len(self._entries)
