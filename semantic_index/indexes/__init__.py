from semantic_index import config
from semantic_index.indexes.base import VectorIndex
from semantic_index.indexes.cluster_index import ClusterIndex
from semantic_index.indexes.flat_index import FlatIndex
from semantic_index.indexes.hnsw_index import GraphNode, HNSWIndex

INDEX_TYPES = {
    "hnsw": HNSWIndex,
    "cluster": ClusterIndex,
    "brute": FlatIndex,
}


def create_index(index_type: str = config.INDEX_TYPE, **params) -> VectorIndex:
    """Build an empty index; missing parameters fall back to config defaults."""
    if index_type not in INDEX_TYPES:
        raise ValueError(f"Unknown index type '{index_type}', expected one of {sorted(INDEX_TYPES)}")
    kwargs = config.index_params(index_type)
    kwargs.update(params)
    return INDEX_TYPES[index_type](**kwargs)


__all__ = ["VectorIndex", "HNSWIndex", "GraphNode", "ClusterIndex", "FlatIndex", "INDEX_TYPES", "create_index"]
