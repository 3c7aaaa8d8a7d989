[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gars"
version = "0.0.3"
description = "Skill and SOP catalog with BM25 search, plan summaries, subagent definitions, a SQLite task store and file/script helpers for a local agent service"
requires-python = ">=3.11"
keywords = [
    "agent",
    "llm",
    "skills",
    "sop",
    "bm25",
    "search",
    "sqlite",
    "plans",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]
dependencies = []

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["gars"]

[tool.hatch.build.targets.sdist]
include = ["gars", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP", "SIM"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
