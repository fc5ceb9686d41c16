"""Marshmallow schemas for request validation and response serialization."""

from .auth import SignInSchema, TokenPairSchema

__all__ = ["SignInSchema", "TokenPairSchema"]
