"""Image retrieval with a bag of visual words and TF-IDF weighting."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePath
from typing import Optional

import numpy as np

from .dictionary import BowDictionary
from .histogram import Histogram
from .image_browser import ROW_LENGTH, ImageBrowser, ScoredImage
from .serialize import deserialize, serialize

logger = logging.getLogger(__name__)


def cosine_distance(candidate: Sequence[float], query: Sequence[float]) -> float:
    """Return one minus the cosine similarity of two equally long vectors.

    A vector of zero length has no direction; its distance to anything is 1.
    """
    first = np.asarray(candidate, dtype=np.float64).ravel()
    second = np.asarray(query, dtype=np.float64).ravel()
    if first.shape != second.shape:
        raise ValueError(
            f"vector sizes do not match: {first.shape[0]} and {second.shape[0]}"
        )
    norms = float(np.linalg.norm(first) * np.linalg.norm(second))
    if norms == 0.0:
        return 1.0
    return 1.0 - float(first @ second) / norms


def tf_idf(histograms: Iterable[Iterable[int]]) -> np.ndarray:
    """Weight word counts by term frequency times inverse document frequency.

    Returns one row per histogram. The weight of word ``s`` in document ``d``
    is ``(n_ds / n_d) * log(N / n_s)``, where ``n_d`` is the number of words in
    the document, ``N`` the number of documents and ``n_s`` the number of
    documents holding the word. Words no document holds, and documents with
    no words, get weight 0. An empty histogram counts as all zeros.
    """
    rows = [list(histogram) for histogram in histograms]
    if not rows:
        raise ValueError("no histograms to weight")
    size = len(rows[0])
    for row in rows:
        if row and len(row) != size:
            raise ValueError(
                f"histogram sizes do not match: {size} and {len(row)}"
            )
    counts = np.array(
        [row if row else [0] * size for row in rows], dtype=np.float64
    ).reshape(len(rows), size)

    documents = counts.shape[0]
    doc_lengths = counts.sum(axis=1)
    doc_frequency = (counts > 0).sum(axis=0).astype(np.float64)

    idf = np.zeros(size, dtype=np.float64)
    present = doc_frequency > 0
    idf[present] = np.log(documents / doc_frequency[present])

    tf = np.zeros_like(counts)
    nonempty = doc_lengths > 0
    tf[nonempty] = counts[nonempty] / doc_lengths[nonempty, None]
    return tf * idf[None, :]


class BoVW:
    """Retrieves the images most similar to a query image.

    The usual order of steps is :meth:`set_train_folder`,
    :meth:`build_descriptors`, :meth:`build_dictionary` or
    :meth:`load_dictionary`, :meth:`compute_histograms`,
    :meth:`select_query_image`, :meth:`apply_tf_idf`,
    :meth:`find_similar_images` and :meth:`save_results_to_html`.
    """

    def __init__(self) -> None:
        self.train_bin_folder = ""
        self.train_img_folder = ""
        self.css_file_path = ""
        self.html_file_path = "test.html"
        self.bow_dic_path = "../dic.bin"
        self.kmeans_max_iter = 10
        self.kmeans_dic_size = 1000
        self.query_bin_path = ""
        self.query_img_path = ""

        self.dictionary = BowDictionary.get_instance()
        self.dictionary.set_vocabulary(None)

        self.train_bin_paths: list[str] = []
        self.descriptors: list[np.ndarray] = []
        self.histograms: list[Histogram] = []
        self.tf_idf_histograms: Optional[np.ndarray] = None
        self.similar_images: list[ScoredImage] = []

    def set_train_folder(self, bin_path: str, img_path: str) -> None:
        """Use the ``.bin`` files of ``bin_path`` and the images of ``img_path``.

        Descriptor files are taken in name order.
        """
        self.train_bin_paths = []
        self.descriptors = []
        self.histograms = []
        self.tf_idf_histograms = None
        self.similar_images = []

        bin_folder = Path(bin_path)
        if not bin_folder.exists():
            raise FileNotFoundError(f"bin folder [{bin_path}] does not exist")
        self.train_bin_folder = str(bin_path)
        logger.info("train bin folder: [%s]", bin_path)
        names = sorted(entry.name for entry in bin_folder.iterdir())
        self.train_bin_paths = [
            f"{self.train_bin_folder}/{name}"
            for name in names
            if PurePath(name).suffix == ".bin"
        ]

        if not Path(img_path).exists():
            raise FileNotFoundError(f"image folder [{img_path}] does not exist")
        self.train_img_folder = str(img_path)
        logger.info("train image folder: [%s]", img_path)

    def build_descriptors(self) -> None:
        """Read the descriptors of every training file."""
        logger.info("extracting descriptors")
        self.descriptors = [deserialize(path) for path in self.train_bin_paths]

    def build_dictionary(self) -> None:
        """Cluster all training descriptors into the dictionary."""
        rows = [matrix for matrix in self.descriptors if matrix.size]
        logger.info(
            "building dictionary: max iter %d, size %d, %d images",
            self.kmeans_max_iter, self.kmeans_dic_size, len(self.descriptors),
        )
        self.dictionary.build(self.kmeans_max_iter, self.kmeans_dic_size, rows)

    def save_dictionary(self) -> None:
        """Store the dictionary at :attr:`bow_dic_path`."""
        serialize(self.dictionary.vocabulary(), self.bow_dic_path)
        logger.info("saved dictionary to [%s]", self.bow_dic_path)

    def load_dictionary(self) -> None:
        """Read the dictionary from :attr:`bow_dic_path`."""
        self.dictionary.set_vocabulary(deserialize(self.bow_dic_path))
        logger.info("loaded dictionary from [%s]", self.bow_dic_path)

    def compute_histograms(self) -> None:
        """Compute a word histogram for every training image."""
        if self.dictionary.empty():
            raise RuntimeError("the dictionary is empty")
        self.histograms = [
            Histogram.from_descriptors(matrix, self.dictionary)
            for matrix in self.descriptors
        ]

    def select_query_image(self, rng: Optional[random.Random] = None) -> str:
        """Add the query's histogram after the training histograms.

        Without a :attr:`query_bin_path` a training file is picked at random.
        Returns the query's descriptor file.
        """
        if not self.query_bin_path:
            if not self.train_bin_paths:
                raise RuntimeError("no training files to pick a query from")
            chooser = rng if rng is not None else random.Random()
            self.query_bin_path = chooser.choice(self.train_bin_paths)
        logger.info("query bin: %s", self.query_bin_path)

        stem = PurePath(self.query_bin_path).stem
        self.query_img_path = f"{self.train_img_folder}/{stem}.png"
        logger.info("query image: %s", self.query_img_path)

        query = deserialize(self.query_bin_path)
        self.histograms.append(Histogram.from_descriptors(query, self.dictionary))
        return self.query_bin_path

    def apply_tf_idf(self) -> None:
        """Weight all histograms, the query's included."""
        if not self.histograms:
            raise RuntimeError("no histograms to weight")
        self.tf_idf_histograms = tf_idf(self.histograms)

    def find_similar_images(self, count: int = 10) -> list[ScoredImage]:
        """Return the ``count`` training files closest to the query.

        Results are ordered by cosine distance, then by file order.
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        if self.tf_idf_histograms is None:
            raise RuntimeError("TF-IDF weights have not been computed")
        candidates = self.tf_idf_histograms[:-1]
        query = self.tf_idf_histograms[-1]
        if len(candidates) != len(self.train_bin_paths):
            raise RuntimeError(
                f"{len(candidates)} weighted histograms for "
                f"{len(self.train_bin_paths)} training files"
            )

        ranked = sorted(
            (cosine_distance(candidate, query), index)
            for index, candidate in enumerate(candidates)
        )
        self.similar_images = [
            ScoredImage(self.train_bin_paths[index], distance)
            for distance, index in ranked[:count]
        ]
        return list(self.similar_images)

    def _result_rows(self) -> list[list[ScoredImage]]:
        rows = [[ScoredImage(self.query_img_path, 0.0)] * ROW_LENGTH]
        images = [
            ScoredImage(
                f"{self.train_img_folder}/{PurePath(path).stem}.png", score
            )
            for path, score in self.similar_images
        ]
        for start in range(0, len(images), ROW_LENGTH):
            chunk = images[start : start + ROW_LENGTH]
            chunk += [chunk[-1]] * (ROW_LENGTH - len(chunk))
            rows.append(chunk)
        return rows

    def save_results_to_html(self) -> None:
        """Write a page with the query in the first row and the results below."""
        logger.info("writing results to [%s]", self.html_file_path)
        browser = ImageBrowser(self.html_file_path)
        browser.create_image_browser(
            f"Image Browser: {len(self.similar_images)} similar images",
            self.css_file_path,
            self._result_rows(),
        )