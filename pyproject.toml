[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eposlibc"
version = "0.1.0"
description = "A small C runtime library in Python: memory and string routines, printf formatting, a TLSF allocator, stdlib helpers, 64-bit division and qsort"
requires-python = ">=3.10"
dependencies = []
keywords = ["libc", "tlsf", "allocator", "printf", "qsort", "strtol", "memory"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["eposlibc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
