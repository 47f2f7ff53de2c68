[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fwpackage"
version = "0.1.0"
description = "Build, extract and describe gzip-compressed TAR firmware packages with an XML manifest"
requires-python = ">=3.10"
dependencies = []
keywords = ["firmware", "package", "tar", "gzip", "pit", "manifest"]
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
    "Topic :: System :: Archiving :: Packaging",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fwpackage"]

[tool.pytest.ini_options]
addopts = "-ra"
