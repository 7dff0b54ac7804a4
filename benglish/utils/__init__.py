"""Utility helpers package."""

from benglish.utils.cache import CacheBackend, build_cache_key, cache_backend
from benglish.utils.exceptions import BenglishException, register_exception_handlers

__all__ = [
    "BenglishException",
    "CacheBackend",
    "build_cache_key",
    "cache_backend",
    "register_exception_handlers",
]
