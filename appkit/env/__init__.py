"""Typed access to environment variables."""