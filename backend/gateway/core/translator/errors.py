"""
Translator Errors
"""
from typing import Optional


class TranslationError(Exception):
    """Base exception for translation errors."""


class UnsupportedTranslationError(TranslationError):
    """Raised when no converter is registered for a (source, target) direction."""

    def __init__(self, source: str, target: str, direction: str):
        super().__init__(f"No {direction} translator registered for {source} -> {target}")
        self.source = source
        self.target = target
        self.direction = direction


class InvalidRequestError(TranslationError):
    """Raised when a request body is not shaped like a chat request at all."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
