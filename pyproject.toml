[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xline"
version = "0.1.0"
description = "Request model, key-range conflict detection and request validation for a distributed key-value store"
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "distributed", "consensus", "etcd", "txn", "lease", "lock"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["xline"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
