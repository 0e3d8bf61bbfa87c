import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

import fitz  # PyMuPDF

from semantic_index import config

logger = logging.getLogger(__name__)

# Whitespace after sentence-ending punctuation, unless the period closes an initial or a title
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])(?<!\b[A-Z]\.)(?<!\bMr\.)(?<!\bMs\.)(?<!\bDr\.)(?<!\bMrs\.)\s+")


@dataclass
class TextSpan:
    """A sentence located on a PDF page: the payload stored next to its vector."""

    text: str
    page_number: int  # 0-based, as PyMuPDF counts pages
    bounds: Tuple[float, float, float, float]  # x0, y0, x1, y1


def split_sentences(text: str) -> List[str]:
    """Split page text into trimmed, non-empty sentences, keeping their punctuation."""
    sentences = []
    last_end = 0
    for match in SENTENCE_BOUNDARY.finditer(text):
        sentence = text[last_end:match.start()].strip()
        if sentence:
            sentences.append(sentence)
        last_end = match.end()
    tail = text[last_end:].strip()
    if tail:
        sentences.append(tail)
    return sentences


def _locate(page, sentence: str):
    """Union of the rectangles PyMuPDF finds for the sentence, or None."""
    rects = page.search_for(sentence)
    if not rects:
        return None
    bounds = fitz.Rect(rects[0])
    for rect in rects[1:]:
        bounds |= rect
    return bounds


def extract_spans(path: str, min_length: int = config.MIN_SPAN_LENGTH) -> List[TextSpan]:
    """
    Read a PDF and return one TextSpan per sentence longer than min_length
    characters that could be located on its page.
    """
    spans = []
    with fitz.open(path) as doc:
        for page_number, page in enumerate(doc):
            text = page.get_text("text")
            if not text.strip():
                continue
            # Line breaks inside a sentence are layout, not content
            text = " ".join(text.split())
            for sentence in split_sentences(text):
                if len(sentence) <= min_length:
                    continue
                bounds = _locate(page, sentence)
                if bounds is None:
                    logger.debug("Could not locate sentence on page %d: %.40s", page_number, sentence)
                    continue
                spans.append(TextSpan(sentence, page_number, (bounds.x0, bounds.y0, bounds.x1, bounds.y1)))
    logger.info("Extracted %d text spans from %s", len(spans), path)
    return spans
