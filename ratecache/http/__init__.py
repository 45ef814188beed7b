"""HTTP response helpers."""

from ratecache.http.decorator import ResponseDecorator, response_decorator

__all__ = ["ResponseDecorator", "response_decorator"]
