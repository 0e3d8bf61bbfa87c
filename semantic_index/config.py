import os

# Index strategy used by SearchFacade / DocumentSearch when none is given
INDEX_TYPE = os.getenv("SEMANTIC_INDEX_TYPE", "hnsw")  # hnsw|cluster|brute

# HNSW parameters
HNSW_M = int(os.getenv("HNSW_M", "16"))
# Unset means 2 * M
HNSW_M_MAX = int(os.getenv("HNSW_M_MAX")) if os.getenv("HNSW_M_MAX") else None
HNSW_EF_CONSTRUCTION = int(os.getenv("HNSW_EF_CONSTRUCTION", "200"))
HNSW_EF_SEARCH = int(os.getenv("HNSW_EF_SEARCH", "50"))

# Cluster (k-means bucket) index parameters
CLUSTER_COUNT = int(os.getenv("CLUSTER_COUNT", "8"))
CLUSTER_MAX_ITERATIONS = int(os.getenv("CLUSTER_MAX_ITERATIONS", "100"))
CLUSTER_N_PROBE = int(os.getenv("CLUSTER_N_PROBE", "1"))

# Embedding collaborator
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")

# Document reading / querying
MIN_SPAN_LENGTH = int(os.getenv("MIN_SPAN_LENGTH", "15"))
DEFAULT_TOP_N = int(os.getenv("DEFAULT_TOP_N", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def index_params(index_type: str) -> dict:
    """Default keyword arguments for an index strategy."""
    if index_type == "hnsw":
        params = {
            "m": HNSW_M,
            "ef_construction": HNSW_EF_CONSTRUCTION,
            "ef_search": HNSW_EF_SEARCH,
        }
        if HNSW_M_MAX is not None:
            params["m_max"] = HNSW_M_MAX
        return params
    if index_type == "cluster":
        return {
            "num_clusters": CLUSTER_COUNT,
            "max_iterations": CLUSTER_MAX_ITERATIONS,
            "n_probe": CLUSTER_N_PROBE,
        }
    if index_type == "brute":
        return {}
    raise ValueError(f"Unknown index type '{index_type}'")
