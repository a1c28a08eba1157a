[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "serialfix"
version = "0.1.0"
description = "Compact binary serialization of Python objects with archives, reference tracking and polymorphic registries"
requires-python = ">=3.10"
dependencies = []
keywords = ["serialization", "binary", "archive", "polymorphism", "bitpack"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["serialfix"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
