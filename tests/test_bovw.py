import random

import numpy as np
import pytest

from bovwsearch.bovw import BoVW, cosine_distance, tf_idf
from bovwsearch.histogram import Histogram
from bovwsearch.serialize import deserialize, serialize

WORDS = np.array([[0, 0], [10, 0], [0, 10], [10, 10]], dtype=np.float32)
IMAGES = 12


def _image_descriptors(i):
    first = i % 4
    second = (i + 1) % 4
    rows = [WORDS[first]] * (i + 1) + [WORDS[second]]
    return np.array(rows, dtype=np.float32)


@pytest.fixture
def dataset(tmp_path):
    bin_dir = tmp_path / "bin"
    img_dir = tmp_path / "images"
    bin_dir.mkdir()
    img_dir.mkdir()
    for i in range(IMAGES):
        serialize(_image_descriptors(i), bin_dir / f"img_{i:02d}.bin")
    (bin_dir / "notes.txt").write_text("ignored")
    dic_path = tmp_path / "dic.bin"
    serialize(WORDS, dic_path)
    return bin_dir, img_dir, dic_path


def _prepared(dataset, tmp_path):
    bin_dir, img_dir, dic_path = dataset
    bovw = BoVW()
    bovw.set_train_folder(str(bin_dir), str(img_dir))
    bovw.bow_dic_path = str(dic_path)
    bovw.html_file_path = str(tmp_path / "out.html")
    bovw.build_descriptors()
    bovw.load_dictionary()
    bovw.compute_histograms()
    return bovw


def test_cosine_distance_of_identical_vectors_is_zero():
    assert cosine_distance([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(0.0, abs=1e-12)


def test_cosine_distance_of_orthogonal_vectors_is_one():
    assert cosine_distance([1.0, 0.0], [0.0, 3.0]) == pytest.approx(1.0)


def test_cosine_distance_is_scale_invariant():
    assert cosine_distance([1.0, 2.0], [3.0, 1.0]) == pytest.approx(
        cosine_distance([2.0, 4.0], [6.0, 2.0])
    )


def test_cosine_distance_size_mismatch():
    with pytest.raises(ValueError):
        cosine_distance([1.0, 2.0], [1.0, 2.0, 3.0])


def test_tf_idf_common_word_has_no_weight():
    weights = tf_idf([[1, 0, 2], [1, 3, 0], [2, 1, 1]])
    assert weights.shape == (3, 3)
    assert np.all(weights[:, 0] == 0.0)


def test_tf_idf_zero_count_gives_zero_weight():
    weights = tf_idf([[1, 0], [1, 1]])
    assert weights[0, 1] == 0.0
    assert weights[1, 1] > 0.0


def test_tf_idf_accepts_histograms_and_empty_ones():
    weights = tf_idf([Histogram([2, 0]), Histogram([]), Histogram([0, 4])])
    assert np.all(weights[1] == 0.0)
    assert weights[0, 0] > 0.0 and weights[2, 1] > 0.0


def test_tf_idf_size_mismatch():
    with pytest.raises(ValueError):
        tf_idf([[1, 2], [1, 2, 3]])


def test_tf_idf_needs_histograms():
    with pytest.raises(ValueError):
        tf_idf([])


def test_set_train_folder_lists_bin_files_in_order(dataset):
    bin_dir, img_dir, _ = dataset
    bovw = BoVW()
    bovw.set_train_folder(str(bin_dir), str(img_dir))
    assert len(bovw.train_bin_paths) == IMAGES
    assert bovw.train_bin_paths == sorted(bovw.train_bin_paths)
    assert bovw.train_bin_paths[0] == f"{bin_dir}/img_00.bin"


def test_set_train_folder_missing_bin_folder(tmp_path):
    with pytest.raises(FileNotFoundError):
        BoVW().set_train_folder(str(tmp_path / "missing"), str(tmp_path))


def test_set_train_folder_missing_image_folder(dataset, tmp_path):
    bin_dir, _, _ = dataset
    with pytest.raises(FileNotFoundError):
        BoVW().set_train_folder(str(bin_dir), str(tmp_path / "missing"))


def test_histograms_count_descriptors(dataset, tmp_path):
    bovw = _prepared(dataset, tmp_path)
    assert len(bovw.histograms) == IMAGES
    for i, histogram in enumerate(bovw.histograms):
        assert sum(histogram) == i + 2
        assert histogram[i % 4] == i + 1


def test_query_finds_itself_first(dataset, tmp_path):
    bovw = _prepared(dataset, tmp_path)
    bin_dir, img_dir, _ = dataset
    bovw.query_bin_path = f"{bin_dir}/img_05.bin"
    bovw.select_query_image()
    assert bovw.query_img_path == f"{img_dir}/img_05.png"
    bovw.apply_tf_idf()
    results = bovw.find_similar_images()
    assert len(results) == 10
    assert results[0].path == f"{bin_dir}/img_05.bin"
    assert results[0].score == pytest.approx(0.0, abs=1e-6)
    scores = [result.score for result in results]
    assert scores == sorted(scores)


def test_random_query_is_a_training_file(dataset, tmp_path):
    bovw = _prepared(dataset, tmp_path)
    chosen = bovw.select_query_image(random.Random(3))
    assert chosen in bovw.train_bin_paths
    assert len(bovw.histograms) == IMAGES + 1


def test_find_similar_images_needs_weights(dataset, tmp_path):
    bovw = _prepared(dataset, tmp_path)
    with pytest.raises(RuntimeError):
        bovw.find_similar_images()


def test_compute_histograms_needs_dictionary(dataset):
    bin_dir, img_dir, _ = dataset
    bovw = BoVW()
    bovw.set_train_folder(str(bin_dir), str(img_dir))
    bovw.build_descriptors()
    with pytest.raises(RuntimeError):
        bovw.compute_histograms()


def test_save_results_to_html(dataset, tmp_path):
    bovw = _prepared(dataset, tmp_path)
    bin_dir, img_dir, _ = dataset
    bovw.query_bin_path = f"{bin_dir}/img_05.bin"
    bovw.select_query_image()
    bovw.apply_tf_idf()
    bovw.find_similar_images()
    bovw.save_results_to_html()
    page = (tmp_path / "out.html").read_text()
    assert "<title>Image Browser: 10 similar images</title>" in page
    assert page.count(f'<img src="{img_dir}/img_05.png" />') >= 3
    assert page.count("border: 5px solid green;") == 1
    last = bovw.similar_images[-1].path.rsplit("/", 1)[1].replace(".bin", ".png")
    assert page.count(f'<img src="{img_dir}/{last}" />') == 3


def test_build_and_save_dictionary_round_trip(dataset, tmp_path):
    bin_dir, img_dir, _ = dataset
    bovw = BoVW()
    bovw.set_train_folder(str(bin_dir), str(img_dir))
    bovw.kmeans_dic_size = 4
    bovw.kmeans_max_iter = 5
    bovw.bow_dic_path = str(tmp_path / "built.bin")
    bovw.build_descriptors()
    bovw.build_dictionary()
    assert len(bovw.dictionary) == 4
    bovw.save_dictionary()
    stored = deserialize(tmp_path / "built.bin")
    np.testing.assert_array_equal(stored, bovw.dictionary.vocabulary())