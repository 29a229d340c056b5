"""Custom exceptions for mdd."""


class MddError(Exception):
    """Base exception for mdd operations."""


class MissingInputError(MddError):
    """No source text or document tree was supplied."""


class ConfigurationError(MddError):
    """A configuration resource could not be loaded or is malformed."""


class ParseError(MddError):
    """Error while building a document tree from source text."""
