# ---------------- Search Facade ----------------
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from semantic_index import config
from semantic_index.errors import DegenerateVector, DimensionMismatch
from semantic_index.indexes import VectorIndex, create_index
from semantic_index.vector_math import VectorLike

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    uid: int
    payload: Any
    distance: float


class SearchFacade:
    """
    Couples one index strategy with the payloads of the vectors it holds.
    One facade per document: a new document gets a fresh facade, nothing is
    ever removed from an existing one.
    """

    def __init__(self, index: Optional[VectorIndex] = None, index_type: str = config.INDEX_TYPE, **index_params):
        if index is not None and len(index):
            # ids are assigned from 0
            raise ValueError(f"SearchFacade needs an empty index, got one holding {len(index)} vectors")
        self.index = index if index is not None else create_index(index_type, **index_params)
        self.payloads: Dict[int, Any] = {}
        self.next_id = 0
        # Single writer
        self.lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.payloads)

    def payload(self, uid: int) -> Any:
        return self.payloads[uid]

    # ---------- Indexing ----------
    def insert(self, vector: VectorLike, payload: Any) -> int:
        """Index one vector under the next sequential id and remember its payload."""
        with self.lock:
            uid = self.next_id
            self.index.insert(vector, uid)
            self.payloads[uid] = payload
            self.next_id += 1
            return uid

    def insert_many(self, items: Iterable[Tuple[VectorLike, Any]]) -> List[int]:
        """
        Batch insert (vector, payload) pairs.
        Vectors the index rejects are logged and skipped; the rest of the batch goes on.
        """
        uids = []
        skipped = 0
        for vector, payload in items:
            try:
                uids.append(self.insert(vector, payload))
            except (DimensionMismatch, DegenerateVector) as e:
                skipped += 1
                logger.warning("Skipping vector for payload %r: %s", payload, e)
        if skipped:
            logger.info("Indexed %d vectors, skipped %d", len(uids), skipped)
        return uids

    # ---------- Search ----------
    def query(self, vector: VectorLike, top_n: int = config.DEFAULT_TOP_N, **search_params) -> List[SearchResult]:
        """
        Top-n most similar payloads, best first.
        Returns a list of SearchResult(uid, payload, distance).
        """
        if not self.payloads:
            return []
        matches = self.index.search(vector, k=top_n, **search_params)
        return [SearchResult(uid, self.payloads[uid], dist) for uid, dist in matches]
