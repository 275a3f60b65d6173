"""Common middleware for BoxOffice."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
