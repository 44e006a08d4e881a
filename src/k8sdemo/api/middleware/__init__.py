"""HTTP middleware."""

from k8sdemo.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
