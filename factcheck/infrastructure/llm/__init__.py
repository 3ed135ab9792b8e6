"""Reasoning-service client and retry policy."""

from .client import GeminiRestClient, inline_part, parse_json_text, text_part
from .retry import InvocationPolicy, ResilientInvoker, is_rate_limit, is_retryable

__all__ = [
    "GeminiRestClient", "inline_part", "parse_json_text", "text_part",
    "InvocationPolicy", "ResilientInvoker", "is_rate_limit", "is_retryable",
]
