"""k-means clustering of descriptor vectors."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

_CHUNK_ROWS = 4096

Descriptors = Union[np.ndarray, Iterable[np.ndarray]]


def _as_matrix(descriptors: Descriptors) -> np.ndarray:
    """Stack descriptors (an array or rows of arrays) into one float32 matrix."""
    if isinstance(descriptors, np.ndarray):
        matrix = descriptors.reshape(1, -1) if descriptors.ndim == 1 else descriptors
        if matrix.ndim != 2:
            raise ValueError("descriptors must form a two-dimensional matrix")
        return np.asarray(matrix, dtype=np.float32)

    rows = [np.asarray(row, dtype=np.float32).reshape(-1, np.asarray(row).shape[-1])
            for row in descriptors]
    if not rows:
        return np.empty((0, 0), dtype=np.float32)
    return np.vstack(rows)


def nearest_centroids(points, centroids) -> np.ndarray:
    """Return, for each row of ``points``, the index of the closest centroid.

    Distances are Euclidean; on a tie the lowest index wins.
    """
    points64 = np.atleast_2d(np.asarray(points, dtype=np.float64))
    centers64 = np.atleast_2d(np.asarray(centroids, dtype=np.float64))
    if centers64.shape[0] == 0:
        raise ValueError("no centroids to match against")
    if points64.shape[0] == 0:
        return np.empty(0, dtype=np.intp)
    if points64.shape[1] != centers64.shape[1]:
        raise ValueError(
            f"points have {points64.shape[1]} columns, "
            f"centroids have {centers64.shape[1]}"
        )

    center_norms = np.einsum("ij,ij->i", centers64, centers64)
    labels = np.empty(points64.shape[0], dtype=np.intp)
    for start in range(0, points64.shape[0], _CHUNK_ROWS):
        chunk = points64[start : start + _CHUNK_ROWS]
        chunk_norms = np.einsum("ij,ij->i", chunk, chunk)
        distances = chunk_norms[:, None] - 2.0 * (chunk @ centers64.T) + center_norms[None, :]
        labels[start : start + chunk.shape[0]] = np.argmin(distances, axis=1)
    return labels


def _initial_centers(matrix: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Pick ``k`` descriptors in random order, preferring distinct ones."""
    order = rng.permutation(matrix.shape[0])
    seen: set[bytes] = set()
    distinct: list[int] = []
    duplicates: list[int] = []
    for index in order:
        key = matrix[index].tobytes()
        if key in seen:
            duplicates.append(int(index))
        else:
            seen.add(key)
            distinct.append(int(index))
    chosen = (distinct + duplicates)[:k]
    return matrix[chosen].copy()


def kmeans(descriptors: Descriptors, k: int, max_iter: int,
           seed: Optional[int] = None) -> np.ndarray:
    """Cluster ``descriptors`` into ``k`` centroids.

    Centroids start at randomly chosen descriptors. Each iteration assigns
    every descriptor to its nearest centroid and moves each centroid to the
    mean of its members; a centroid with no members stays where it is.
    Returns a ``(k, cols)`` float32 matrix.
    """
    matrix = _as_matrix(descriptors)
    if matrix.shape[0] == 0:
        raise ValueError("no descriptors to cluster")
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}")
    if k > matrix.shape[0]:
        raise ValueError(
            f"cannot pick {k} centroids from {matrix.shape[0]} descriptors"
        )
    if max_iter < 0:
        raise ValueError(f"max_iter must not be negative, got {max_iter}")

    rng = np.random.default_rng(seed)
    centers = _initial_centers(matrix, k, rng).astype(np.float64)
    points = matrix.astype(np.float64)

    for iteration in range(max_iter):
        logger.debug("kmeans iteration %d", iteration)
        labels = nearest_centroids(points, centers)
        counts = np.bincount(labels, minlength=k)
        sums = np.zeros_like(centers)
        np.add.at(sums, labels, points)
        occupied = counts > 0
        centers[occupied] = sums[occupied] / counts[occupied, None]

    return centers.astype(np.float32)