from semantic_index.quantization.kmeans import KMeans, assign, nearest_centroid, train
from semantic_index.quantization.product_quantizer import ProductQuantizer

__all__ = ["KMeans", "train", "assign", "nearest_centroid", "ProductQuantizer"]
