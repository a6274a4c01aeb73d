[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "zanderworld"
version = "0.1.0"
description = "Simulation core of a voxel landscape lander game: fixed-point terrain, particles, destructible scenery and a thrust-driven ship."
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "voxel", "lander", "terrain", "particles", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Arcade",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["zanderworld*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
