"""
Marshal decoder for data written by Ruby's Marshal.dump (format 4.8).
"""
import logging
import math

from .cursor import ByteCursor
from .errors import FormatError
from .pattern import translate_regexp
from .structure import SymbolTable, Value, normalize_key
from .tags import (
    BIGNUM_NEGATIVE,
    BIGNUM_POSITIVE,
    DEFAULT_MAX_DEPTH,
    ENCODING_NEW_SYMBOL,
    ENCODING_SYMLINK,
    FIXNUM_OFFSET,
    MARSHAL_VERSION,
    TypeTag,
)

logger = logging.getLogger(__name__)

INT64_MODULUS = 1 << 64


def _wrap_int64(n: int) -> int:
    """Reduces n to a signed 64-bit integer, two's complement style."""
    n %= INT64_MODULUS
    return n - INT64_MODULUS if n >= INT64_MODULUS // 2 else n


class MarshalDecoder:
    """
    Decodes one Marshal-serialized value into Python objects.

    Each decoder owns its cursor and its symbol table, so an instance serves
    exactly one top-level value; create a new one per value.

    Options:
        max_depth: deepest allowed nesting of values.
        strict: raise FormatError on an unknown type tag. When False the tag
            is logged and decoded as None.
        truncate_bignums: wrap bignums to signed 64-bit integers instead of
            returning them at full precision.
        encoding, errors: how raw string bytes become str.
    """
    def __init__(self, source, *, max_depth: int = DEFAULT_MAX_DEPTH, strict: bool = True,
                 truncate_bignums: bool = False, encoding: str = "utf-8",
                 errors: str = "surrogateescape"):
        self.cursor = ByteCursor(source)
        self.symbols = SymbolTable()
        self.max_depth = max_depth
        self.strict = strict
        self.truncate_bignums = truncate_bignums
        self.encoding = encoding
        self.errors = errors
        self.depth = 0

    def decode(self) -> Value:
        """Main decode entry point: version header, then one value."""
        try:
            self._check_version()
            result = self._read_value()
        finally:
            self.cursor.release()

        logger.debug(
            "Decoded %s ending at offset %d (%d symbols)",
            type(result).__name__, self.cursor.offset, len(self.symbols),
        )
        return result

    # --------------------------
    # Low-level utilities
    # --------------------------

    def _check_version(self):
        version = self.cursor.read(len(MARSHAL_VERSION))
        if version != MARSHAL_VERSION:
            raise FormatError(
                f"Unsupported marshal version {version[0]}.{version[1]}, "
                f"wanted {MARSHAL_VERSION[0]}.{MARSHAL_VERSION[1]}"
            )
        logger.debug("Marshal header %s accepted", version.hex())

    def _read_fixnum(self) -> int:
        """Reads the variable-length signed integer used for values, lengths and indexes."""
        c = self.cursor.read_byte()
        if c > 127:
            c -= 256  # control byte is signed

        if c == 0:
            return 0

        if c > 0:
            if 4 < c < 128:
                return c - FIXNUM_OFFSET
            # c little-endian magnitude bytes
            return int.from_bytes(self.cursor.read(c), "little")

        if -129 < c < -4:
            return c + FIXNUM_OFFSET

        # -c bytes over an all-ones value: sign-extend what was read
        data = self.cursor.read(-c)
        return int.from_bytes(data, "little") - (1 << (8 * len(data)))

    def _read_length(self) -> int:
        offset = self.cursor.offset
        n = self._read_fixnum()
        if n < 0:
            raise FormatError(f"Negative length {n} at offset {offset}")
        return n

    def _decode_text(self, raw: bytes) -> str:
        try:
            return raw.decode(self.encoding, self.errors)
        except UnicodeDecodeError as exc:
            raise FormatError(f"String is not valid {self.encoding}: {exc}") from exc

    # --------------------------
    # Parsing functions
    # --------------------------

    def _read_value(self) -> Value:
        """Reads one tag byte and the value it introduces."""
        if self.depth >= self.max_depth:
            raise FormatError(
                f"Values nested deeper than {self.max_depth} levels at offset {self.cursor.offset}"
            )

        self.depth += 1
        try:
            return self._dispatch(self.cursor.read_byte())
        finally:
            self.depth -= 1

    def _dispatch(self, tag: int) -> Value:
        if tag == TypeTag.NIL:
            return None
        if tag == TypeTag.TRUE:
            return True
        if tag == TypeTag.FALSE:
            return False

        if tag == TypeTag.FIXNUM:
            return self._read_fixnum()
        if tag == TypeTag.BIGNUM:
            return self._read_bignum()
        if tag == TypeTag.FLOAT:
            return self._read_float()

        if tag == TypeTag.STRING:
            return self._read_string()
        if tag == TypeTag.SYMBOL:
            return self._read_symbol()
        if tag == TypeTag.SYMLINK:
            return self._read_symlink()
        if tag == TypeTag.IVAR:
            return self._read_ivar()

        if tag == TypeTag.ARRAY:
            return self._read_array()
        if tag == TypeTag.HASH:
            return self._read_hash()
        if tag == TypeTag.REGEXP:
            return self._read_regexp()

        offset = self.cursor.offset - 1
        if self.strict:
            raise FormatError(f"Unsupported type byte {tag:#04x} ({chr(tag)!r}) at offset {offset}")

        logger.warning("Unsupported type byte %#04x at offset %d, decoding as None", tag, offset)
        return None

    def _read_bignum(self) -> int:
        """Parses a sign byte, a length in 16-bit words and a little-endian magnitude."""
        offset = self.cursor.offset
        sign = self.cursor.read_byte()
        if sign not in (BIGNUM_POSITIVE, BIGNUM_NEGATIVE):
            raise FormatError(f"Invalid bignum sign byte {sign:#04x} at offset {offset}")

        words = self._read_length()
        n = int.from_bytes(self.cursor.read(2 * words), "little")

        if self.truncate_bignums:
            n = _wrap_int64(n)
        if sign == BIGNUM_NEGATIVE:
            n = -n
        if self.truncate_bignums:
            n = _wrap_int64(n)
        return n

    def _read_bytes(self) -> bytes:
        """Parses a length-prefixed byte string."""
        return self.cursor.read(self._read_length())

    def _read_string(self) -> str:
        """Parses a length-prefixed byte string as text."""
        return self._decode_text(self._read_bytes())

    def _read_ivar(self) -> Value:
        """
        Parses a value wrapped with instance variables.
        Only the encoding variable of strings, symbols and regexps is understood.
        """
        tag = self.cursor.peek(1)
        if tag == bytes([TypeTag.STRING]):
            self.cursor.read(1)  # skip '"'
            value = self._read_string()
        elif tag == bytes([TypeTag.REGEXP]):
            self.cursor.read(1)  # skip '/'
            value = self._read_regexp(wrapped=True)
        else:
            value = self._read_value()

        self._strip_encoding()
        return value

    def _strip_encoding(self):
        """Consumes a single encoding instance variable and discards it."""
        offset = self.cursor.offset
        signature = self.cursor.read(2)

        if signature == ENCODING_NEW_SYMBOL:
            self._read_symbol()  # ":E" or ":encoding"; still takes a table slot
        elif signature == ENCODING_SYMLINK:
            self._read_symlink()
        else:
            raise FormatError(
                f"Unsupported string encoding signature {signature.hex(' ')} at offset {offset}"
            )

        self._read_value()  # true/false or the encoding name

    def _strip_optional_encoding(self):
        """Consumes an encoding instance variable if one starts here."""
        # 0x06 is never a type tag, so it can only open an annotation
        if self.cursor.peek(1) == ENCODING_NEW_SYMBOL[:1]:
            self._strip_encoding()

    def _read_symbol(self) -> str:
        """Parses a new symbol and adds it to the symbol table."""
        return self.symbols.add(self._read_string())

    def _read_symlink(self) -> str:
        """Parses a backreference to an earlier symbol."""
        return self.symbols.lookup(self._read_fixnum())

    def _read_float(self) -> float:
        """Parses a float stored as text."""
        offset = self.cursor.offset
        # Old dumps append mantissa bytes after a NUL
        text = self._read_string().split("\x00", 1)[0]

        if text == "inf":
            return math.inf
        if text == "-inf":
            return -math.inf

        try:
            return float(text)
        except ValueError as exc:
            raise FormatError(f"Invalid float {text!r} at offset {offset}") from exc

    def _read_array(self) -> list:
        """Parses a count followed by that many values."""
        size = self._read_length()
        items = []
        for _ in range(size):
            items.append(self._read_value())
        return items

    def _read_hash(self) -> dict:
        """Parses key/value pairs; keys are narrowed to text."""
        size = self._read_length()
        obj = {}
        for _ in range(size):
            key = normalize_key(self._read_value())
            obj[key] = self._read_value()
        return obj

    def _read_regexp(self, wrapped: bool = False):
        """
        Parses a regexp source and its option byte.
        A wrapped regexp leaves its encoding variable to _read_ivar.
        """
        source = self._read_string()
        options = self.cursor.read_byte()
        if not wrapped:
            self._strip_optional_encoding()
        return translate_regexp(source, options)


def load(stream, **options) -> Value:
    """
    Decodes one Marshal value from a binary file-like object.
    Bytes after the value are left in the stream.
    """
    return MarshalDecoder(stream, **options).decode()


def loads(data: bytes, **options) -> Value:
    """Decodes one Marshal value from a bytes-like object."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"loads() requires a bytes-like object, not {type(data).__name__}")
    return MarshalDecoder(data, **options).decode()
