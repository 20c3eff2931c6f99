"""The bag-of-visual-words dictionary: a shared matrix of codewords."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .kmeans import Descriptors, kmeans


class BowDictionary:
    """A vocabulary of visual words, one centroid per row.

    One process-wide instance is available through :meth:`get_instance`.
    """

    _instance: Optional["BowDictionary"] = None

    def __init__(self) -> None:
        self._vocabulary = np.empty((0, 0), dtype=np.float32)

    @classmethod
    def get_instance(cls) -> "BowDictionary":
        """Return the shared dictionary, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def vocabulary(self) -> np.ndarray:
        """The codeword matrix, one word per row."""
        return self._vocabulary

    def set_vocabulary(self, vocabulary) -> None:
        """Replace the codewords; ``None`` clears the dictionary."""
        if vocabulary is None:
            self._vocabulary = np.empty((0, 0), dtype=np.float32)
            return
        matrix = np.asarray(vocabulary)
        if matrix.ndim == 1:
            matrix = matrix.reshape(1, -1)
        if matrix.ndim != 2:
            raise ValueError("a vocabulary must be a two-dimensional matrix")
        self._vocabulary = matrix

    def empty(self) -> bool:
        """True when the dictionary holds no codewords."""
        return self._vocabulary.shape[0] == 0

    def __len__(self) -> int:
        return self._vocabulary.shape[0]

    def build(self, max_iter: int, dic_size: int, descriptors: Descriptors) -> None:
        """Compute ``dic_size`` codewords from ``descriptors`` by k-means."""
        self._vocabulary = kmeans(descriptors, dic_size, max_iter)