[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tdswire"
version = "0.1.0"
description = "TDS wire-format building blocks: packets, column metadata, value decoding and a connection pool"
requires-python = ">=3.10"
dependencies = []
keywords = ["tds", "sql server", "mssql", "protocol", "wire format", "connection pool"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tdswire"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
