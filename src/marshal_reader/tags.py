"""
Constants for the Marshal 4.8 wire format: version header and type tags.
"""
from enum import IntEnum

MARSHAL_VERSION = b"\x04\x08"


class TypeTag(IntEnum):
    """Single-byte type tags that prefix every serialized value."""
    NIL = ord("0")
    TRUE = ord("T")
    FALSE = ord("F")
    FIXNUM = ord("i")
    BIGNUM = ord("l")
    FLOAT = ord("f")
    STRING = ord('"')
    ARRAY = ord("[")
    HASH = ord("{")
    SYMBOL = ord(":")
    SYMLINK = ord(";")
    REGEXP = ord("/")
    IVAR = ord("I")


# Small fixnums are stored as value + 5 (or value - 5 when negative)
FIXNUM_OFFSET = 5

BIGNUM_POSITIVE = ord("+")
BIGNUM_NEGATIVE = ord("-")

# One instance variable follows, keyed by a new symbol (":E") or by a
# backreference to one (";\x00")
ENCODING_NEW_SYMBOL = bytes([0x06, TypeTag.SYMBOL])
ENCODING_SYMLINK = bytes([0x06, TypeTag.SYMLINK])

# Regexp option bits
REGEXP_IGNORECASE = 0x01
REGEXP_EXTENDED = 0x02
REGEXP_MULTILINE = 0x04

DEFAULT_MAX_DEPTH = 128
