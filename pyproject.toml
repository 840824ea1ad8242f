[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "splitwrite"
version = "0.1.0"
description = "A concurrency primitive for read-heavy workloads using a mirrored pair of data structures."
requires-python = ">=3.10"
dependencies = []
keywords = ["concurrency", "left-right", "read-optimized", "epoch", "synchronization"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["splitwrite"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
