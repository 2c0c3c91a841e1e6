[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gennprojects"
version = "0.1.0"
description = "Run chains and Python-side model helpers for spiking neural network example projects: HH voltage-clamp GA, sparse Izhikevich networks and mushroom body models."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "spiking neural networks",
    "neuroscience",
    "izhikevich",
    "mushroom body",
    "hodgkin-huxley",
    "simulation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Life",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
genn-hhvclamp-run = "gennprojects.hhvclamp_run:main"
genn-izh-sparse-run = "gennprojects.izh_sparse_run:main"
genn-mbody-run = "gennprojects.mbody_run:main"

[tool.hatch.build.targets.wheel]
packages = ["gennprojects"]

[tool.hatch.build.targets.sdist]
include = [
    "gennprojects",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
