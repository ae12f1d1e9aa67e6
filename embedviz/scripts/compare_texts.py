#!/usr/bin/env python3
"""
Print the cosine similarity of two strings.

Example:
  embedviz-compare "a red car" "a crimson automobile" --name cars
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv

from embedviz.core.config import settings
from embedviz.core.logger import setup_logging
from embedviz.services.embed_cache_service import EmbedCacheService
from embedviz.tools.embedder import get_embedder

LOG = logging.getLogger("embedviz.compare_texts")


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Cosine similarity of two texts")
    parser.add_argument("text1")
    parser.add_argument("text2")
    parser.add_argument("--name", default=None, help="If set, cache the embeddings as <name>_1/<name>_2")
    parser.add_argument("--data-dir", default=settings.DATA_DIR)
    parser.add_argument("--provider", default=None)
    parser.add_argument("--model", default=None)
    args = parser.parse_args()

    setup_logging()
    embedder = get_embedder(args.provider, model=args.model)
    service = EmbedCacheService(data_dir=args.data_dir, model=embedder.model, provider=embedder)

    score = asyncio.run(service.compare_texts(args.text1, args.text2, name=args.name))
    LOG.info("similarity(%r, %r) = %.4f", args.text1, args.text2, score)
    print(f"{score:.4f}")


if __name__ == "__main__":
    main()
