"""
End-to-end: texts -> cached vectors -> similarity -> PCA -> chart.
"""

import asyncio
import io

import numpy as np
from PIL import Image

from embedviz.models.graph_models import GraphConfig
from embedviz.services.projection import embeddings_to_graph, project
from embedviz.services.similarity import cosine_similarity


class TestWordsToChart:

    def test_cat_dog_car(self, service, provider, tmp_path):
        words = ["cat", "dog", "car"]
        vectors = asyncio.run(service.resolve_many(words, provider))

        assert sorted(p.name for p in tmp_path.glob("*.dat")) == ["car.dat", "cat.dat", "dog.dat"]
        assert cosine_similarity(vectors[0], vectors[1]) > cosine_similarity(vectors[0], vectors[2])

        coords = project(vectors, 2)
        assert len(coords) == 3 and all(len(c) == 2 for c in coords)

        def label(point, i):
            return point._replace(label=words[i])

        config = GraphConfig(type="scatter", name="words.jpg")
        filename, buffer = asyncio.run(
            embeddings_to_graph(vectors, config, on_each=label, data_dir=tmp_path)
        )
        assert filename == tmp_path / "words.jpg"
        assert len(buffer) > 0
        assert filename.read_bytes() == buffer
        assert Image.open(io.BytesIO(buffer)).size == (1200, 800)

    def test_second_run_served_from_cache(self, service, provider):
        words = ["cat", "dog", "car"]
        first = asyncio.run(service.resolve_many(words, provider))
        second = asyncio.run(service.resolve_many(words, provider))
        assert len(provider.calls) == 3
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a, b)
