[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shedb"
version = "0.1.0"
description = "Building blocks of an in-memory IAVL state-commit store: AVL nodes, iterators, on-disk layouts, proofs and configuration"
requires-python = ">=3.10"
dependencies = []
keywords = ["iavl", "avl", "merkle", "state-commit", "database", "proof"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["shedb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
