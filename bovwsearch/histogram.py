"""Histograms of visual-word occurrences."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from typing import Union

import numpy as np

from .dictionary import BowDictionary
from .kmeans import nearest_centroids

PathLike = Union[str, "os.PathLike[str]"]


class Histogram:
    """Counts of descriptors per codeword of a dictionary."""

    def __init__(self, data: Iterable[int] = ()) -> None:
        self._data = [int(value) for value in data]

    @classmethod
    def from_descriptors(cls, descriptors, dictionary: BowDictionary) -> "Histogram":
        """Count, for each codeword, the descriptors that lie closest to it.

        Empty descriptors give an empty histogram; otherwise the histogram
        has one bin per codeword.
        """
        matrix = np.asarray(descriptors)
        if matrix.size == 0:
            return cls()
        matrix = np.atleast_2d(matrix)
        vocabulary = dictionary.vocabulary()
        labels = nearest_centroids(matrix, vocabulary)
        counts = np.bincount(labels, minlength=vocabulary.shape[0])
        return cls(counts.tolist())

    def data(self) -> list[int]:
        """A copy of the bin values."""
        return list(self._data)

    def empty(self) -> bool:
        """True when the histogram has no bins."""
        return not self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[int]:
        return iter(self._data)

    def __getitem__(self, index: int) -> int:
        return self._data[index]

    def __setitem__(self, index: int, value: int) -> None:
        self._data[index] = int(value)

    def __str__(self) -> str:
        return "".join(f"{value}, " for value in self._data)

    def __repr__(self) -> str:
        return f"Histogram({self._data!r})"

    def write_csv(self, filename: PathLike) -> None:
        """Write the bins on one line, each value followed by a comma."""
        with open(filename, "w", encoding="utf-8") as stream:
            stream.write("".join(f"{value}," for value in self._data))
            stream.write("\n")

    @classmethod
    def read_csv(cls, filename: PathLike) -> "Histogram":
        """Read a histogram from the first line of a comma-separated file."""
        with open(filename, encoding="utf-8") as stream:
            line = stream.readline().rstrip("\r\n")
        fields = line.split(",")
        if fields and fields[-1] == "":
            fields.pop()
        try:
            return cls(int(field) for field in fields)
        except ValueError as error:
            raise ValueError(f"{os.fspath(filename)}: invalid histogram value") from error