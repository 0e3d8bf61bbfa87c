# ---------------- HNSW index ----------------
import heapq
import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from semantic_index import config
from semantic_index.indexes.base import VectorIndex
from semantic_index.quantization.kmeans import Seed, make_rng
from semantic_index.vector_math import VectorLike

logger = logging.getLogger(__name__)

# (distance, uid) pairs, ordered best first
Candidates = List[Tuple[float, int]]


def unit_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine distance of two vectors already scaled to unit length."""
    return 1.0 - float(np.dot(a, b))


@dataclass
class GraphNode:
    """
    One vector in the proximity graph.
    neighbors[layer] holds ids of other nodes in the same index, for layers 0..level.
    """

    id: int
    level: int
    vector: np.ndarray
    neighbors: List[List[int]] = field(default_factory=list)

    def __post_init__(self):
        if not self.neighbors:
            self.neighbors = [[] for _ in range(self.level + 1)]


class HNSWIndex(VectorIndex):
    """
    Hierarchical Navigable Small World graph over cosine distance.

    Nodes live in an id-keyed arena owned by the index; neighbor lists only
    store ids. Insertions are serialized by a lock, searches are read-only and
    assume no insertion runs concurrently.
    """

    def __init__(
        self,
        m: int = config.HNSW_M,
        m_max: Optional[int] = None,
        ef_construction: int = config.HNSW_EF_CONSTRUCTION,
        ef_search: int = config.HNSW_EF_SEARCH,
        level_multiplier: Optional[float] = None,
        dimension: Optional[int] = None,
        seed: Seed = None,
        diverse_neighbors: bool = False,
    ):
        super().__init__(dimension)
        if m < 1:
            raise ValueError("m must be at least 1")
        self.m = m
        self.m_max = m_max if m_max is not None else 2 * m
        if self.m_max < m:
            raise ValueError(f"m_max ({self.m_max}) must be >= m ({m})")
        if ef_construction < 1 or ef_search < 1:
            raise ValueError("ef_construction and ef_search must be at least 1")
        self.ef_construction = ef_construction
        self.ef_search = ef_search
        # 1/ln(M) is the usual choice; M=1 would divide by zero
        self.level_multiplier = level_multiplier if level_multiplier is not None else 1.0 / math.log(max(m, 2))
        self.diverse_neighbors = diverse_neighbors
        self.rng = make_rng(seed)

        self.nodes: Dict[int, GraphNode] = {}
        self.entry_point: Optional[int] = None
        self.lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, uid: int) -> bool:
        return uid in self.nodes

    @property
    def max_level(self) -> int:
        """Level of the entry point, -1 while empty."""
        if self.entry_point is None:
            return -1
        return self.nodes[self.entry_point].level

    def node(self, uid: int) -> GraphNode:
        return self.nodes[uid]

    def neighbors(self, uid: int, layer: int = 0) -> List[int]:
        return list(self.nodes[uid].neighbors[layer])

    # ---------- Internals ----------
    def _random_level(self) -> int:
        # 1 - random() lies in (0, 1], so the log is always defined
        u = 1.0 - self.rng.random()
        return int(math.floor(-math.log(u) * self.level_multiplier))

    def _distance(self, query: np.ndarray, uid: int) -> float:
        return unit_distance(query, self.nodes[uid].vector)

    def _search_layer(self, query: np.ndarray, entry_points: List[int], ef: int, layer: int) -> Candidates:
        """
        Best-first search restricted to one layer.
        Returns up to ef (distance, uid) pairs, best first.
        """
        visited = set(entry_points)
        frontier: Candidates = []  # min-heap on distance
        results: List[Tuple[float, int]] = []  # max-heap via negated distance

        for ep in entry_points:
            d = self._distance(query, ep)
            heapq.heappush(frontier, (d, ep))
            heapq.heappush(results, (-d, ep))
        while len(results) > ef:
            heapq.heappop(results)

        while frontier:
            dist, current = heapq.heappop(frontier)
            worst = -results[0][0]
            if dist > worst and len(results) >= ef:
                break

            for neighbor in self.nodes[current].neighbors[layer]:
                if neighbor in visited:
                    continue
                visited.add(neighbor)

                d = self._distance(query, neighbor)
                if len(results) < ef or d < -results[0][0]:
                    heapq.heappush(frontier, (d, neighbor))
                    heapq.heappush(results, (-d, neighbor))
                    if len(results) > ef:
                        heapq.heappop(results)

        return sorted((-neg, uid) for neg, uid in results)

    def _select_neighbors(self, candidates: Candidates, m: int) -> List[int]:
        """Pick up to m neighbor ids from (distance-to-base, uid) candidates."""
        ordered = sorted(candidates)
        if not self.diverse_neighbors:
            return [uid for _, uid in ordered[:m]]

        # Keep a candidate only if it is closer to the base than to every
        # neighbor already kept; fill remaining slots with the skipped ones.
        selected: List[int] = []
        skipped: List[int] = []
        for dist, uid in ordered:
            if len(selected) >= m:
                break
            vec = self.nodes[uid].vector
            if all(unit_distance(vec, self.nodes[s].vector) > dist for s in selected):
                selected.append(uid)
            else:
                skipped.append(uid)
        for uid in skipped:
            if len(selected) >= m:
                break
            selected.append(uid)
        return selected

    def _link(self, uid: int, neighbor: int, layer: int) -> None:
        """Add a back-edge neighbor -> uid and prune the neighbor to m_max."""
        node = self.nodes[neighbor]
        links = node.neighbors[layer]
        links.append(uid)
        if len(links) > self.m_max:
            candidates = [(unit_distance(node.vector, self.nodes[other].vector), other) for other in links]
            node.neighbors[layer] = self._select_neighbors(candidates, self.m_max)

    # ---------- Core methods ----------
    def insert(self, vector: VectorLike, uid: int) -> None:
        with self.lock:
            vec = self._prepare(vector)
            uid = self._check_uid(uid)
            if self.dimension is None:
                self.dimension = vec.shape[0]

            level = self._random_level()
            node = GraphNode(id=uid, level=level, vector=vec)

            if self.entry_point is None:
                self.nodes[uid] = node
                self.entry_point = uid
                logger.debug("HNSW: first node %d at level %d", uid, level)
                return

            top_level = self.max_level
            self.nodes[uid] = node
            ep = [self.entry_point]

            # Greedy descent through the layers the new node does not occupy
            for layer in range(top_level, level, -1):
                ep = [self._search_layer(vec, ep, 1, layer)[0][1]]

            for layer in range(min(top_level, level), -1, -1):
                found = self._search_layer(vec, ep, self.ef_construction, layer)
                selected = self._select_neighbors(found, self.m)
                node.neighbors[layer] = selected
                for neighbor in selected:
                    self._link(uid, neighbor, layer)
                ep = [found[0][1]]

            if level > top_level:
                self.entry_point = uid
                logger.debug("HNSW: node %d is the new entry point at level %d", uid, level)

    def search(self, query: VectorLike, k: int = 5, ef: Optional[int] = None, **kwargs) -> List[Tuple[int, float]]:
        """
        k nearest neighbors of the query. ef defaults to ef_search; ef < k is
        allowed and yields at most ef results.
        """
        self._check_k(k)
        if self.entry_point is None:
            return []
        ef = self.ef_search if ef is None else ef
        if ef < 1:
            raise ValueError(f"ef must be at least 1, got {ef}")
        q = self._prepare(query)

        ep = [self.entry_point]
        for layer in range(self.max_level, 0, -1):
            ep = [self._search_layer(q, ep, 1, layer)[0][1]]

        found = self._search_layer(q, ep, ef, 0)
        return [(uid, dist) for dist, uid in found[:k]]
