"""
Value model and per-decode bookkeeping for Marshal data.

Decoded values are plain Python objects:

    nil -> None, true/false -> bool, fixnum/bignum -> int, float -> float,
    string/symbol -> str, array -> list, hash -> dict, regexp -> re.Pattern
"""
import re
from typing import Dict, List, Union

from .errors import FormatError

__all__ = [
    "Value",
    "SymbolTable",
    "normalize_key",
]

Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"], re.Pattern]


class SymbolTable:
    """Symbols seen so far in one decode, in order of first appearance."""
    def __init__(self):
        self._symbols: List[str] = []

    def add(self, name: str) -> str:
        self._symbols.append(name)
        return name

    def lookup(self, index: int) -> str:
        if not 0 <= index < len(self._symbols):
            raise FormatError(
                f"Symbol backreference {index} out of range (table has {len(self._symbols)} entries)"
            )
        return self._symbols[index]

    def __len__(self):
        return len(self._symbols)

    def __repr__(self):
        return f"SymbolTable({self._symbols!r})"


def normalize_key(key: Value) -> str:
    """
    Narrows a decoded hash key to text.
    Strings pass through, integers become decimal text, anything else is "".
    """
    if isinstance(key, str):
        return key
    # bool is an int subclass but is not an integer key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    return ""
