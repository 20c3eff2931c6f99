"""Writing of a small HTML page that shows scored images."""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import TextIO

logger = logging.getLogger(__name__)

_IMAGE_SUFFIXES = (".png", ".jpg")


class HtmlWriter:
    """Emits HTML fragments to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def _line(self, text: str) -> None:
        self._stream.write(text + "\n")

    def open_document(self) -> None:
        """Start an HTML5 document."""
        self._line("<!DOCTYPE html>")
        self._line("<html>")

    def close_document(self) -> None:
        """End the document."""
        self._line("</html>")

    def add_css_style(self, stylesheet: str) -> None:
        """Link a CSS stylesheet in a head section."""
        self._line("<head>")
        self._line(
            f'<link rel = "stylesheet" type = "text/css" href = "{stylesheet}" />'
        )
        self._line("</head> ")

    def add_title(self, title: str) -> None:
        """Add the page title."""
        self._line(f"<title>{title}</title>")

    def open_body(self) -> None:
        self._line("<body>")

    def close_body(self) -> None:
        self._line("</body>")

    def open_row(self) -> None:
        self._line('<div class="row">')

    def close_row(self) -> None:
        self._line("</div>")

    def add_image(self, img_path: str, score: float, highlight: bool = False) -> None:
        """Add one image column with its file name and score."""
        path = PurePath(img_path)
        if path.suffix not in _IMAGE_SUFFIXES:
            logger.error(
                "unknown image file extension %r, only png and jpg files are supported",
                path.suffix,
            )
        if highlight:
            self._line('<div class="column" style="border: 5px solid green;">')
        else:
            self._line('<div class="column">')
        self._line(f"<h2> {path.name} </h2> ")
        self._line(f'<img src="{img_path}" />')
        self._line(f"<p>score = {score:.2f}</p>")
        self._line("</div>")