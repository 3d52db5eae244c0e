"""
Custom exceptions for ngtranslate-extract.
"""

class ExtractorError(Exception):
    """Base exception for ngtranslate-extract."""
    pass

class ParseError(ExtractorError):
    """Raised when an artifact cannot be parsed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path

class ConfigError(ExtractorError):
    """Raised when configuration-related errors occur."""
    pass

class SerializationError(ExtractorError):
    """Raised when a translations asset cannot be rendered or read back."""
    pass
