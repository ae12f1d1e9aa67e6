#!/usr/bin/env python3
"""
Embed a list of words and plot them as a labelled scatter chart.

Each word is resolved through the on-disk cache (`<data-dir>/<key>.dat`), so
only new words cost a provider call. The vectors are reduced to 2-D with PCA
and rendered to `<data-dir>/<name>`.

Example:
  embedviz-plot --name scatter_words.jpg --scale 4
  embedviz-plot journalist writer newspaper firetruck --type line
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv
from tqdm.asyncio import tqdm_asyncio

from embedviz.core.config import settings
from embedviz.core.logger import setup_logging
from embedviz.models.graph_models import GraphConfig, Point2D
from embedviz.services.embed_cache_service import EmbedCacheService
from embedviz.services.projection import embeddings_to_graph
from embedviz.tools.embedder import get_embedder

LOG = logging.getLogger("embedviz.plot_words")

DEFAULT_WORDS = [
    "journalist", "writer", "newspaper", "firetruck", "fireman", "fireplace",
    "pencil", "notebook", "cucumber", "cellphone", "curious", "drunk",
    "dedicated", "quote", "television", "source", "tomato", "analyse",
    "data", "code", "editorial",
]


async def plot_words(words, config: GraphConfig, service: EmbedCacheService, data_dir: str):
    vectors = await tqdm_asyncio.gather(
        *(service.resolve(w) for w in words), desc="Embedding", unit="word"
    )

    def label(point: Point2D, i: int) -> Point2D:
        return point._replace(label=words[i])

    return await embeddings_to_graph(vectors, config, on_each=label, data_dir=data_dir)


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Plot word embeddings in 2-D")
    parser.add_argument("words", nargs="*", help="Words to plot (defaults to a built-in list)")
    parser.add_argument("--data-dir", default=settings.DATA_DIR, help="Cache and output directory")
    parser.add_argument("--provider", default=None, help="openai or ollama (env default used if not set)")
    parser.add_argument("--model", default=None, help="Embedding model override")
    parser.add_argument("--name", default="scatter_words.jpg", help="Output image file name")
    parser.add_argument("--type", choices=["scatter", "line"], default="scatter")
    parser.add_argument("--scale", type=float, default=4)
    parser.add_argument("--header", default=None)
    args = parser.parse_args()

    setup_logging()
    words = args.words or DEFAULT_WORDS

    embedder = get_embedder(args.provider, model=args.model)
    service = EmbedCacheService(data_dir=args.data_dir, model=embedder.model, provider=embedder)
    config = GraphConfig(name=args.name, type=args.type, scale=args.scale, header=args.header)

    LOG.info("Plotting %d words with %s", len(words), embedder.model)
    filename, buffer = asyncio.run(plot_words(words, config, service, args.data_dir))
    LOG.info("Done. Wrote %s (%d bytes)", filename, len(buffer))


if __name__ == "__main__":
    main()
