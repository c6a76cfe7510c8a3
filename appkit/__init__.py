"""Application building blocks: configuration, dependency injection, environment variables and execution policies."""

__version__ = "0.1.0"