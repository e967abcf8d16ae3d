[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spbwire"
version = "1.0.0"
description = "Protocol buffers wire-format decoding, bitfield range checks, base64 for JSON bytes fields and whole-file I/O"
requires-python = ">=3.10"
dependencies = []
keywords = ["protobuf", "protocol buffers", "wire format", "varint", "zigzag", "base64", "deserialization"]
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
packages = ["spbwire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
