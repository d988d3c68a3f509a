[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spanbridge"
version = "0.1.0"
description = "Schema discovery, type mapping and row streaming for reading Cloud Spanner data into analytical engines"
requires-python = ">=3.10"
dependencies = []
keywords = ["spanner", "database", "schema", "types", "streaming", "googlesql", "postgresql"]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["spanbridge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
