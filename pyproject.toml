[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "panacus"
version = "0.4.0"
description = "Parsing and bookkeeping helpers for counting coverage in pangenome graphs: GFA paths and walks, BED regions, histogram tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["pangenome", "gfa", "bioinformatics", "coverage", "histogram", "bed", "k-mer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["panacus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
