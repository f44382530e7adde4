"""ASGI middleware."""

from passdesk.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
