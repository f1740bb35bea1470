[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "deepflow"
version = "0.1.0"
description = "A minimalist terminal tool for focused, single-tasking deep work sessions."
requires-python = ">=3.10"
keywords = ["deep work", "focus", "productivity", "time tracking", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Scheduling",
    "Topic :: Utilities",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
flow = "deepflow.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["deepflow"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
