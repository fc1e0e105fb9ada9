"""
Translation of serialized Ruby regular expressions into compiled `re` patterns.
"""
import re

from .errors import FormatError
from .tags import REGEXP_IGNORECASE, REGEXP_MULTILINE


def inline_flags(options: int) -> str:
    """
    Maps Ruby regexp option bits to a Python inline-flag group.

    Ruby's multiline mode lets "." match a newline, which is re.DOTALL here.
    The extended bit and the encoding bits have no counterpart and are ignored.
    """
    flags = ""
    if options & REGEXP_IGNORECASE:
        flags += "i"
    if options & REGEXP_MULTILINE:
        flags += "s"
    return f"(?{flags})" if flags else ""


def translate_regexp(source: str, options: int) -> re.Pattern:
    """Compiles a Ruby regexp source with its option byte."""
    pattern = inline_flags(options) + source
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise FormatError(f"Regexp /{source}/ does not compile: {exc}") from exc
