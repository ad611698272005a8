"""Gemini exchange connectivity."""

from .client import (
    GeminiAPIError,
    GeminiClient,
    GeminiClientError,
    GeminiDecodeError,
    OrderOption,
    OrderSide,
    UnsupportedPairError,
)

__all__ = [
    "GeminiAPIError",
    "GeminiClient",
    "GeminiClientError",
    "GeminiDecodeError",
    "OrderOption",
    "OrderSide",
    "UnsupportedPairError",
]
