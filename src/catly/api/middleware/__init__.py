"""Catly API middleware."""

from catly.api.middleware.body_limit import BodySizeLimitMiddleware
from catly.api.middleware.request_id import RequestIdMiddleware

__all__ = ["BodySizeLimitMiddleware", "RequestIdMiddleware"]
