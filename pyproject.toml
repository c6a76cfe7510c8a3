[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "appkit"
version = "0.1.0"
description = "Building blocks for applications: configuration loading and validation, dependency injection, typed environment variables and execution policies."
requires-python = ">=3.11"
dependencies = [
    "pyyaml",
]
keywords = [
    "configuration",
    "validation",
    "dependency-injection",
    "environment",
    "retry",
    "circuit-breaker",
    "rate-limit",
    "timeout",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["appkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
