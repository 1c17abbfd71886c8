[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sectorkit"
version = "0.1.0"
description = "Sector-addressed block devices, MBR partition tables and a PS/2 keyboard decoder"
requires-python = ">=3.10"
dependencies = []
keywords = ["block device", "mbr", "partition table", "chs", "lba", "scancode", "keyboard"]
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
    "Topic :: System :: Filesystems",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sectorkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
