[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "codetect"
version = "0.1.0"
description = "Code chunking, embedding providers and semantic search over an SQLite embedding store"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["embeddings", "semantic-search", "code-search", "ollama", "litellm", "sqlite"]
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
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["codetect"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
