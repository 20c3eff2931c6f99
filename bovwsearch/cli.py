"""Command line entry point: find the images most similar to a query."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from collections.abc import Sequence
from typing import Optional

from .bovw import BoVW


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bovwsearch",
        description="Find the images most similar to a query image.",
    )
    parser.add_argument("--bin-folder", default="../../images-freiburg-x10/bin",
                        help="folder of training descriptor files")
    parser.add_argument("--image-folder", default="../../images-freiburg-x10/data1",
                        help="folder of training images")
    parser.add_argument("--css", default="../rsc/style.css",
                        help="stylesheet linked from the result page")
    parser.add_argument("--output", default="test.html",
                        help="result page to write")
    parser.add_argument(
        "--query",
        default="../../images-freiburg-x10/bin/imageCompressedCam0_0001580.bin",
        help="descriptor file of the query image",
    )
    parser.add_argument("--random-query", action="store_true",
                        help="pick a random training image as the query")
    parser.add_argument("--dictionary", default="../dic.bin",
                        help="dictionary file to load or write")
    parser.add_argument("--build-dictionary", action="store_true",
                        help="compute the dictionary and save it instead of loading it")
    parser.add_argument("--dictionary-size", type=int, default=1000)
    parser.add_argument("--max-iter", type=int, default=10)
    parser.add_argument("--count", type=int, default=10,
                        help="number of similar images to show")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for picking a random query")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the search; returns the process exit status."""
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    bovw = BoVW()
    try:
        bovw.set_train_folder(args.bin_folder, args.image_folder)
        bovw.css_file_path = args.css
        bovw.html_file_path = args.output
        bovw.kmeans_dic_size = args.dictionary_size
        bovw.kmeans_max_iter = args.max_iter
        bovw.bow_dic_path = args.dictionary
        if not args.random_query:
            bovw.query_bin_path = args.query

        bovw.build_descriptors()
        if args.build_dictionary:
            bovw.build_dictionary()
            bovw.save_dictionary()
        else:
            bovw.load_dictionary()
        bovw.compute_histograms()
        bovw.select_query_image(random.Random(args.seed))
        bovw.apply_tf_idf()
        bovw.find_similar_images(args.count)
        bovw.save_results_to_html()
    except (OSError, ValueError, RuntimeError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())