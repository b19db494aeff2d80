"""HTTP middleware."""

from .exception_handler import corpus_exception_handler
from .request_context import RequestContextMiddleware

__all__ = ["corpus_exception_handler", "RequestContextMiddleware"]
