[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvmark"
version = "0.1.0"
description = "A pure-Python CPU benchmark with CRC-checked list, matrix and state-machine workloads, plus an ELF32 memory-image loader"
requires-python = ">=3.10"
dependencies = []
keywords = ["benchmark", "crc", "elf", "risc-v", "memory-image"]
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
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rvmark = "rvmark.benchmark:main"
rvmark-elfload = "rvmark.elfloader:main"

[tool.hatch.build.targets.wheel]
packages = ["rvmark"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
