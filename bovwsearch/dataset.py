"""Loading of descriptor datasets stored as ``.bin`` files."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .serialize import PathLike, deserialize


def load_dataset(bin_path: PathLike) -> list[np.ndarray]:
    """Return every descriptor row of every ``.bin`` file in ``bin_path``.

    Files are visited in name order; each row comes back as a ``(1, cols)``
    array.
    """
    folder = Path(bin_path)
    if not folder.is_dir():
        raise FileNotFoundError(f"not a directory: {folder}")

    rows: list[np.ndarray] = []
    for path in sorted(folder.iterdir()):
        if path.suffix != ".bin":
            continue
        descriptors = deserialize(path)
        rows.extend(descriptors[n : n + 1].copy() for n in range(descriptors.shape[0]))
    return rows