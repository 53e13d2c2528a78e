"""HTTP transport shared by the decision engine and the CLI."""

from .client import HttpClient

__all__ = ["HttpClient"]
