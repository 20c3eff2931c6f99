"""A web page that shows rows of scored images."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from typing import NamedTuple, Union

from .html_writer import HtmlWriter

PathLike = Union[str, "os.PathLike[str]"]

ROW_LENGTH = 3


class ScoredImage(NamedTuple):
    """An image path with its score."""

    path: str
    score: float


class ImageBrowser:
    """Writes an image browser page to ``output_file``."""

    def __init__(self, output_file: PathLike) -> None:
        self.output_file = output_file

    def add_full_row(self, writer: HtmlWriter, row: Sequence[tuple[str, float]],
                     first_row: bool = False) -> None:
        """Write one row of three images; the first image of the first row is highlighted.

        Images with an empty path are left out.
        """
        if len(row) != ROW_LENGTH:
            raise ValueError(f"a row holds {ROW_LENGTH} images, got {len(row)}")
        writer.open_row()
        highlight = first_row
        for path, score in row:
            if not path:
                continue
            writer.add_image(path, score, highlight)
            highlight = False
        writer.close_row()

    def create_image_browser(self, title: str, stylesheet: str,
                             rows: Iterable[Sequence[tuple[str, float]]]) -> None:
        """Write the whole page with the given title, stylesheet and rows."""
        with open(self.output_file, "w", encoding="utf-8") as stream:
            writer = HtmlWriter(stream)
            writer.open_document()
            writer.add_title(title)
            writer.add_css_style(stylesheet)
            writer.open_body()
            for index, row in enumerate(rows):
                self.add_full_row(writer, row, first_row=index == 0)
            writer.close_body()
            writer.close_document()