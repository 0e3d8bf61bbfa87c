import logging
from typing import Sequence

import numpy as np
from sentence_transformers import SentenceTransformer

from semantic_index import config

logger = logging.getLogger(__name__)


class EmbeddingFactory:
    MODELS = {
        "sentence-transformers": config.EMBEDDING_MODEL,
    }
    _cache = {}

    @classmethod
    def get_encoder(cls, embedding: str = "sentence-transformers"):
        if embedding not in cls.MODELS:
            raise ValueError(f"Unknown embedding method: {embedding}")
        if embedding not in cls._cache:
            logger.info("Loading model for: %s (%s)...", embedding, cls.MODELS[embedding])
            cls._cache[embedding] = SentenceTransformer(cls.MODELS[embedding])
        return cls._cache[embedding]


def embed_texts(encoder, texts: Sequence[str]) -> np.ndarray:
    """
    Encode texts into L2-normalized float32 rows.
    Any object with a SentenceTransformer-style encode(list_of_texts) works as encoder.
    """
    if not texts:
        return np.zeros((0, 0), dtype=np.float32)
    vecs = np.asarray(encoder.encode(list(texts)), dtype=np.float32)
    if vecs.ndim == 1:
        vecs = vecs[None, :]
    norms = np.linalg.norm(vecs, axis=1, keepdims=True)
    return vecs / np.where(norms > 0, norms, 1.0)


def embed_text(encoder, text: str) -> np.ndarray:
    return embed_texts(encoder, [text])[0]
