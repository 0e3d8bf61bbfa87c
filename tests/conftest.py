"""
Shared fixtures. The sentence-transformers model is replaced by a
deterministic bag-of-words encoder so no model is downloaded.
"""

import hashlib
import logging
import re

import fitz
import numpy as np
import pytest

STUB_DIM = 64


class StubEncoder:
    """Hashes lowercase words into a fixed number of buckets."""

    def __init__(self, dim: int = STUB_DIM):
        self.dim = dim
        self.calls = 0

    def encode(self, texts):
        self.calls += 1
        out = np.zeros((len(texts), self.dim), dtype=np.float32)
        for row, text in enumerate(texts):
            for word in re.findall(r"[a-z0-9]+", text.lower()):
                bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dim
                out[row, bucket] += 1.0
        return out


@pytest.fixture
def stub_encoder():
    return StubEncoder()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def unit_vectors(rng):
    def make(n: int, dim: int) -> np.ndarray:
        data = rng.standard_normal((n, dim))
        return data / np.linalg.norm(data, axis=1, keepdims=True)

    return make


PAGE_ONE = [
    "The quick brown fox jumps over the lazy dog.",
    "Vector search finds similar sentences quickly.",
    "Tiny.",
]
PAGE_TWO = [
    "Graph indexes connect every vector to its neighbors.",
]


@pytest.fixture
def sample_pdf(tmp_path):
    path = tmp_path / "sample.pdf"
    doc = fitz.open()
    for lines in (PAGE_ONE, PAGE_TWO):
        page = doc.new_page()
        for i, line in enumerate(lines):
            page.insert_text((72, 72 + 28 * i), line, fontsize=11)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """setup_logging() binds a handler to the captured stderr; drop it after each test."""
    yield
    logger = logging.getLogger("semantic_index")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
