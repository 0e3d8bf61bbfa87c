# ---------------- Document search session ----------------
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Sequence

from semantic_index import config
from semantic_index.embedding import EmbeddingFactory, embed_text, embed_texts
from semantic_index.facade import SearchFacade, SearchResult
from semantic_index.utils.doc_reader import TextSpan, extract_spans

logger = logging.getLogger(__name__)


class DocumentSearch:
    """
    Semantic search over one PDF at a time.

    Loading a document extracts its sentences, embeds them and fills a fresh
    SearchFacade on a dedicated single-thread worker. The facade is swapped in
    only once indexing is complete; loading another document drops it.
    """

    def __init__(
        self,
        encoder=None,
        index_type: str = config.INDEX_TYPE,
        min_span_length: int = config.MIN_SPAN_LENGTH,
        **index_params,
    ):
        self._encoder = encoder
        self.index_type = index_type
        self.index_params = index_params
        self.min_span_length = min_span_length

        self.facade: Optional[SearchFacade] = None
        self.document: Optional[str] = None
        self._pending: Optional[Future] = None
        # Bumped by every load(); only the job of the latest load publishes its facade
        self._generation = 0
        self._publish_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="semantic-index")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def encoder(self):
        if self._encoder is None:
            self._encoder = EmbeddingFactory.get_encoder()
        return self._encoder

    @property
    def ready(self) -> bool:
        return self.facade is not None and (self._pending is None or self._pending.done())

    # ---------- Indexing ----------
    def index_spans(self, spans: Sequence[TextSpan]) -> SearchFacade:
        """Embed the spans and index them into a new facade."""
        facade = SearchFacade(index_type=self.index_type, **self.index_params)
        if spans:
            vectors = embed_texts(self.encoder, [span.text for span in spans])
            facade.insert_many(zip(vectors, spans))
        logger.info("Indexed %d of %d spans (%s index)", len(facade), len(spans), self.index_type)
        return facade

    def _index_document(self, path: str, generation: int) -> SearchFacade:
        facade = self.index_spans(extract_spans(path, min_length=self.min_span_length))
        with self._publish_lock:
            if generation == self._generation:
                self.facade = facade
                self.document = path
            else:
                logger.debug("Discarding index of %s, a newer document was loaded", path)
        return facade

    def load(self, path: str) -> Future:
        """Schedule indexing of a PDF; the returned future resolves to its facade."""
        with self._publish_lock:
            self._generation += 1
            self.facade = None
            self.document = None
            generation = self._generation
        self._pending = self._executor.submit(self._index_document, path, generation)
        return self._pending

    def wait(self, timeout: Optional[float] = None) -> Optional[SearchFacade]:
        """Block until the last scheduled load finishes and return its facade."""
        if self._pending is not None:
            return self._pending.result(timeout)
        return self.facade

    # ---------- Search ----------
    def search(self, text: str, top_n: int = config.DEFAULT_TOP_N, **search_params) -> List[SearchResult]:
        """Best matching spans for a free-text query; empty while nothing is loaded."""
        facade = self.facade
        if facade is None:
            return []
        return facade.query(embed_text(self.encoder, text), top_n, **search_params)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
