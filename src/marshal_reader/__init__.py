"""
Reader for Ruby's Marshal serialization format (version 4.8).
"""
from .decoder import MarshalDecoder, load, loads
from .errors import FormatError, MarshalDecodeError, UnexpectedEndOfInput
from .structure import SymbolTable, Value

__all__ = [
    'load',
    'loads',
    'MarshalDecoder',
    'MarshalDecodeError',
    'FormatError',
    'UnexpectedEndOfInput',
    'SymbolTable',
    'Value',
]
