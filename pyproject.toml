[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pompkit"
version = "0.1.0"
description = "Building blocks for partially observed Markov process models: distributions, initial states, measurements, skeletons and synthetic likelihood"
requires-python = ">=3.10"
keywords = [
    "partially observed Markov process",
    "state space model",
    "Euler-multinomial",
    "deterministic skeleton",
    "synthetic likelihood",
    "simulation",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pompkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
