"""
Vector similarity helpers.

Dependencies: numpy
System role: Cosine scoring for the in-process chunk search backend
"""

from typing import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two equal-length vectors.

    Args:
        a: First vector (list or numpy array)
        b: Second vector (list or numpy array)

    Returns:
        Similarity in [-1.0, 1.0]; 0.0 when either vector has zero magnitude

    Raises:
        ValueError: If the vectors differ in length
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.shape != vec_b.shape:
        raise ValueError(f"Vector length mismatch: {len(vec_a)} != {len(vec_b)}")

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))
