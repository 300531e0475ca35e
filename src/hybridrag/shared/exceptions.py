"""
Common exceptions for HybridRAG.
"""


class HybridRagError(Exception):
    """Base exception for all HybridRAG errors."""
    pass


class ConfigurationError(HybridRagError):
    """Raised when there are configuration issues."""
    pass


class ValidationError(HybridRagError):
    """Raised when caller-supplied arguments are invalid."""
    pass


class TokenizationError(HybridRagError):
    """Raised when a tokenizer strategy fails on an input."""
    pass


class InferenceError(HybridRagError):
    """Raised when the inference backend fails or returns unusable output."""
    pass

