"""Per-client rate limiting and conditional request caching for HTTP APIs."""

__version__ = "0.1.0"
