# bovwsearch

Find visually similar images with a bag-of-visual-words model.

Each image is described by a set of feature descriptors (for example SIFT),
stored as small binary matrix files. `bovwsearch` clusters the descriptors
into a vocabulary of visual words with k-means, turns every image into a
histogram of those words, weights the histograms with TF-IDF and ranks the
images by cosine distance to a query image. The best matches are written to
an HTML page you can open in a browser.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Data layout

- A folder of descriptor files, one `<name>.bin` per image. Each file holds a
  header of three little-endian 32-bit integers (element type code, rows,
  columns) followed by the raw row-major matrix data.
  `bovwsearch.serialize.serialize` and `bovwsearch.serialize.deserialize`
  write and read this format; supported element types are 8-, 16- and 32-bit
  integers and 16-, 32- and 64-bit floats, with one or more channels.
- A folder of the matching images, `<name>.png`. The images are only linked
  from the result page; they are never read.

`bovwsearch.dataset.load_dataset` reads every `.bin` file of a folder, in
name order, and returns all descriptor rows as `(1, cols)` arrays.

## Command line

```
bovwsearch --help
```

The command runs the whole pipeline: it reads the descriptor files, loads the
vocabulary (or, with `--build-dictionary`, computes and saves it), computes
histograms, takes the query (`--query`, or a random training file with
`--random-query`), applies TF-IDF, finds the most similar images and writes
the HTML page.

Options:

- `--bin-folder`, `--image-folder`: training descriptor files and images.
- `--query`: descriptor file of the query image; `--random-query` picks one
  of the training files instead, reproducibly with `--seed`.
- `--dictionary`: vocabulary file to load or, with `--build-dictionary`, to
  write. `--dictionary-size` (default 1000) and `--max-iter` (default 10)
  control k-means.
- `--count`: number of similar images to show (default 10).
- `--css`: stylesheet linked from the page; `--output`: page to write
  (default `test.html`).
- `-v`, `--verbose`: log progress.

The exit status is 0 on success and 1 when a file is missing or a step fails;
the error is printed to standard error.

## Library use

```python
from bovwsearch.bovw import BoVW

search = BoVW()
search.set_train_folder("data/bin", "data/images")
search.build_descriptors()
search.build_dictionary()
search.save_dictionary()
search.compute_histograms()
search.select_query_image(None)
search.apply_tf_idf()
results = search.find_similar_images(10)
search.save_results_to_html()
```

Settings are plain attributes of `BoVW`: `css_file_path`, `html_file_path`,
`bow_dic_path`, `kmeans_max_iter`, `kmeans_dic_size` and `query_bin_path`.
`find_similar_images` returns `ScoredImage(path, score)` tuples ordered by
cosine distance. The page shows the query in its first row and the results
below, three per row.

Lower-level pieces:

- `bovwsearch.kmeans.kmeans(descriptors, k, max_iter, seed)` clusters
  descriptors into `k` float32 centroids;
  `bovwsearch.kmeans.nearest_centroids` assigns points to their closest
  centroid.
- `bovwsearch.dictionary.BowDictionary` holds the shared vocabulary
  (`BowDictionary.get_instance()`), filled with `build` or `set_vocabulary`;
  `len()` gives the number of words.
- `bovwsearch.histogram.Histogram` counts visual words for one image
  (`Histogram.from_descriptors`), supports indexing and iteration, and reads
  and writes single-line CSV files (`write_csv`, `read_csv`).
- `bovwsearch.bovw.tf_idf` and `bovwsearch.bovw.cosine_distance` do the
  weighting and the comparison.
- `bovwsearch.html_writer.HtmlWriter` writes HTML fragments to a text stream;
  `bovwsearch.image_browser.ImageBrowser` writes the whole page, three images
  per row, the first image of the first row highlighted.

## What it does not do

`bovwsearch` does not compute descriptors from images. It has no feature
detector and does not read PNG or JPEG files; the `.bin` descriptor files must
be produced by other tools.