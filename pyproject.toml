[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bovwsearch"
version = "0.1.0"
description = "Bag-of-visual-words image retrieval: k-means vocabularies, word histograms, TF-IDF ranking and an HTML result page"
requires-python = ">=3.10"
keywords = ["bag of visual words", "image retrieval", "k-means", "tf-idf", "descriptors", "histogram"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bovwsearch = "bovwsearch.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bovwsearch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
