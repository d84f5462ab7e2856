"""Custom exception hierarchy for the letter-link engine."""


class LetterLinkError(Exception):
    """Base exception for engine failures."""


class ConfigurationError(LetterLinkError):
    """Raised when a config object holds unusable values."""


class PreconditionError(LetterLinkError):
    """Raised when a caller breaks an engine invariant (a bug in the caller)."""


class ValidationError(LetterLinkError):
    """Raised when the board integrity checks fail."""
