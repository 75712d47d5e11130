[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "keal"
version = "0.1.0"
description = "Core of a plugin-driven application launcher: fuzzy matching, desktop entries, dmenu input and user plugins"
requires-python = ">=3.10"
keywords = ["launcher", "dmenu", "rofi", "desktop-entry", "fuzzy", "xdg", "plugins"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
    "Typing :: Typed",
]
dependencies = [
    "cbor2",
    "more-itertools",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["keal"]

[tool.hatch.build.targets.sdist]
include = ["keal", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
