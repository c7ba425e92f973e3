"""Error types raised by the encoder, edit client, and controller."""

from __future__ import annotations


class EnhancerError(RuntimeError):
    pass


class ValidationError(EnhancerError):
    pass


class DecodeError(EnhancerError):
    pass


class ReadError(EnhancerError):
    pass


class ServiceError(EnhancerError):
    pass


class EmptyResultError(EnhancerError):
    pass


__all__ = [
    "DecodeError",
    "EmptyResultError",
    "EnhancerError",
    "ReadError",
    "ServiceError",
    "ValidationError",
]
