"""
Exceptions raised while decoding Marshal data.
"""


class MarshalDecodeError(Exception):
    """Base class for every Marshal decoding error."""
    pass


class UnexpectedEndOfInput(MarshalDecodeError, EOFError):
    """The stream ended in the middle of a field."""
    pass


class FormatError(MarshalDecodeError, ValueError):
    """The bytes are readable but do not form valid Marshal data."""
    pass
