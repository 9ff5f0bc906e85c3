[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qtcodec"
version = "0.1.0"
description = "Quadtree codec for 8-bit binary PGM images, lossless or lossy"
requires-python = ">=3.10"
dependencies = []
keywords = ["quadtree", "image", "compression", "pgm", "codec"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
qtcodec = "qtcodec.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["qtcodec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
