r"""
clistruct value converters.

Overview
- A converter is a callable taking the raw token and returning the typed value.
  Failures are signalled with the two standard exceptions, the parser maps them
  to faults:
  • OverflowError → the decoded value does not fit the target type (out of range).
  • ValueError    → the token is not a valid literal for the target type.

- Integer(bits, signed=...): base-10 prefix decoding in the manner of C's strtoll
  (leading whitespace, optional sign, digits; anything after the digits is ignored;
  a token without digits decodes to 0).
- Float(bits): decimal prefix decoding in the manner of C's strtof/strtod, also
  accepting inf/infinity/nan.
- String(): verbatim.

The zero rule
- Any numeric token that decodes to zero is rejected unless the token is exactly
  the string "0". This is how garbage ("abc", "x1") is told apart from a real
  zero, and it also rejects spellings such as "00", "-0" or "0.0".

Ready-made instances
- int16, uint16, int32, uint32, int64, uint64, float32, float64, string

Example
    >>> int16("42")
    42
    >>> uint32("12abc")
    12
    >>> float32("0.5")
    0.5
"""
import math
import re
import struct
from typing import final

_SPACES = "[ \t\n\v\f\r]*"

_INTEGER = re.compile(_SPACES + r"([+-]?[0-9]+)")

_FLOAT = re.compile(
    _SPACES + r"([+-]?(?:inf(?:inity)?|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))",
    re.IGNORECASE,
)


class Converter:
    """
    Base class for value converters.

    Attributes
    - __name__: short type label used in help and diagnostics (e.g. "int16").
    - kind: family of the converter ("integer", "float" or "string"); the parser
      uses it to pick the matching invalid-value fault.
    - default: zero value of the type, used to initialize a record field.
    """
    kind = "value"
    default = None

    def __init__(self, name, /):
        self.__name__ = name

    def __call__(self, token, /):
        raise NotImplementedError

    def __repr__(self):
        return self.__name__


@final
class Integer(Converter):
    """
    Fixed-width integer converter.

    Parameters
    - bits: width of the target type (16, 32 or 64).
    - signed: two's complement range when True, otherwise [0, 2**bits).
    """
    kind = "integer"
    default = 0

    def __init__(self, bits, /, *, signed):
        if bits not in (16, 32, 64):
            raise ValueError("integer width must be 16, 32 or 64 bits")
        super().__init__(("int%d" if signed else "uint%d") % bits)
        self.bits = bits
        self.signed = bool(signed)
        if self.signed:
            self.minimum, self.maximum = -(1 << bits - 1), (1 << bits - 1) - 1
        else:
            self.minimum, self.maximum = 0, (1 << bits) - 1

    def __call__(self, token, /):
        match = _INTEGER.match(token)
        # 20 significant digits cover every 64-bit value; longer runs would also
        # trip the interpreter's int() digit limit.
        if match and len(match[1].lstrip("+-").lstrip("0")) > 20:
            raise OverflowError("%r does not fit in %s" % (token, self.__name__))
        value = int(match[1]) if match else 0

        if not self.minimum <= value <= self.maximum:
            raise OverflowError("%r does not fit in %s" % (token, self.__name__))
        if value == 0 and token != "0":
            raise ValueError("%r is not a valid integer" % token)
        return value


@final
class Float(Converter):
    """
    IEEE-754 binary floating point converter.

    Parameters
    - bits: 32 (single precision, values are rounded through struct "f") or 64.
    """
    kind = "float"
    default = 0.0

    def __init__(self, bits, /):
        if bits not in (32, 64):
            raise ValueError("float width must be 32 or 64 bits")
        super().__init__("float%d" % bits)
        self.bits = bits

    def _round(self, value):
        if self.bits == 64:
            return value
        # struct refuses finite values beyond the single precision range.
        return struct.unpack("f", struct.pack("f", value))[0]

    def __call__(self, token, /):
        match = _FLOAT.match(token)
        if match:
            literal = match[1]
            value = float(literal)
        else:
            literal, value = "", 0.0

        if math.isinf(value) and "inf" not in literal.lower():
            raise OverflowError("%r does not fit in %s" % (token, self.__name__))
        try:
            rounded = self._round(value)
        except OverflowError:
            raise OverflowError("%r does not fit in %s" % (token, self.__name__)) from None
        # Non-zero mantissa digits that round to zero are an underflow.
        if rounded == 0 and re.search(r"[1-9]", re.split(r"[eE]", literal)[0]):
            raise OverflowError("%r does not fit in %s" % (token, self.__name__))

        if rounded == 0 and token != "0":
            raise ValueError("%r is not a valid float" % token)
        return rounded


@final
class String(Converter):
    """
    Verbatim converter: every token is a valid string.
    """
    kind = "string"
    default = ""

    def __init__(self):
        super().__init__("str")

    def __call__(self, token, /):
        return token


int16 = Integer(16, signed=True)
uint16 = Integer(16, signed=False)
int32 = Integer(32, signed=True)
uint32 = Integer(32, signed=False)
int64 = Integer(64, signed=True)
uint64 = Integer(64, signed=False)
float32 = Float(32)
float64 = Float(64)
string = String()


__all__ = (
    # Types
    "Converter",
    "Integer",
    "Float",
    "String",

    # Instances
    "int16",
    "uint16",
    "int32",
    "uint32",
    "int64",
    "uint64",
    "float32",
    "float64",
    "string",
)
