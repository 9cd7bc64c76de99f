"""Vector encoding and similarity functions for the embedding store."""

from typing import Callable, Dict, List, Sequence, Union

import numpy as np

from ..models.embedding import SimilarityMetric

VECTOR_DTYPE = np.dtype("<f4")

SimilarityFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


def encode_vector(values: Sequence[float]) -> bytes:
    """Pack a vector as a little-endian float32 blob."""
    return np.asarray(values, dtype=VECTOR_DTYPE).tobytes()


def decode_vector(blob: bytes) -> np.ndarray:
    """Unpack a float32 blob."""
    return np.frombuffer(blob, dtype=VECTOR_DTYPE)


def decode_vector_list(blob: bytes) -> List[float]:
    return decode_vector(blob).astype(np.float64).tolist()


def cosine_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """dot(a, b) / (|a| * |b|), and 0 when either norm is 0."""
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros_like(dots)
    np.divide(dots, norms, out=scores, where=norms > 0)
    return scores


def euclidean_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """1 / (1 + euclidean distance)."""
    distances = np.linalg.norm(matrix - query, axis=1)
    return 1.0 / (1.0 + distances)


def dot_product_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Raw inner product."""
    return matrix @ query


SIMILARITY_FUNCTIONS: Dict[SimilarityMetric, SimilarityFunction] = {
    SimilarityMetric.COSINE: cosine_similarity,
    SimilarityMetric.EUCLIDEAN: euclidean_similarity,
    SimilarityMetric.DOT_PRODUCT: dot_product_similarity,
}


def compute_similarities(
    metric: Union[SimilarityMetric, str],
    query: Sequence[float],
    matrix: np.ndarray,
) -> np.ndarray:
    """Score every row of ``matrix`` against ``query`` in float64."""
    function = SIMILARITY_FUNCTIONS[SimilarityMetric(metric)]
    query_vector = np.asarray(query, dtype=np.float64)
    candidates = np.asarray(matrix, dtype=np.float64).reshape(-1, query_vector.shape[0])
    return function(query_vector, candidates)
