"""
Static entropy code for prediction residuals.

Residuals in -6..6 map to fixed variable-length codes. The codes are
prefix-free (no code is a prefix of another), which is what makes greedy
left-to-right decoding of a flat bitstream unambiguous; the scan order of
the table does not matter. The first pixel of an image bypasses the table
and is written as a plain 8-bit binary number.
"""

from types import MappingProxyType

from bitarray import bitarray, frozenbitarray

FIRST_CELL_BITS = 8


class UnknownSymbol(ValueError):
    """A value has no code in the table."""

    def __init__(self, value):
        super().__init__(f"No code for residual value {value}.")
        self.value = value


class MalformedStream(ValueError):
    """The bitstream cannot be parsed at the given bit position."""

    def __init__(self, position, reason):
        super().__init__(f"Malformed bitstream at bit {position}: {reason}")
        self.position = position


def is_prefix_free(codes):
    """Returns True if no code in codes is a prefix of another one."""
    codes = [bitarray(code) for code in codes]
    for i, code in enumerate(codes):
        for j, other in enumerate(codes):
            if i != j and len(code) <= len(other) and other[: len(code)] == code:
                return False
    return True


HUFFMAN_CODES = MappingProxyType(
    {
        0: frozenbitarray("1"),
        1: frozenbitarray("00"),
        -1: frozenbitarray("011"),
        2: frozenbitarray("0100"),
        -2: frozenbitarray("01011"),
        3: frozenbitarray("010100"),
        -3: frozenbitarray("0101011"),
        4: frozenbitarray("01010100"),
        -4: frozenbitarray("010101011"),
        5: frozenbitarray("0101010100"),
        -5: frozenbitarray("01010101011"),
        6: frozenbitarray("010101010100"),
        -6: frozenbitarray("0101010101011"),
    }
)

if not is_prefix_free(HUFFMAN_CODES.values()):
    raise RuntimeError("HUFFMAN_CODES must be prefix-free.")


def encode_symbol(value):
    """Returns a copy of the code for a residual value."""
    try:
        return bitarray(HUFFMAN_CODES[value])
    except (KeyError, TypeError):
        raise UnknownSymbol(value) from None


def decode_symbol(bits, idx):
    """
    Decodes the code starting at bit idx.

    Args:
        bits (bitarray): The bitstream.
        idx (int): Position of a code boundary in bits.

    Returns:
        tuple[int, int]: The residual value and the number of bits consumed.
    """
    for value, code in HUFFMAN_CODES.items():
        end = idx + len(code)
        if end <= len(bits) and bits[idx:end] == code:
            return value, len(code)
    raise MalformedStream(idx, "no code matches")


def encode_first_cell(value):
    """Encodes the first pixel as a fixed-width unsigned binary number."""
    if value not in range(2**FIRST_CELL_BITS):
        raise UnknownSymbol(value)
    return bitarray(f"{int(value):0{FIRST_CELL_BITS}b}")


def decode_first_cell(bits, idx=0):
    """Reads the fixed-width first pixel. Returns (value, bits consumed)."""
    if idx + FIRST_CELL_BITS > len(bits):
        raise MalformedStream(idx, "stream ends inside the first pixel")
    value = int(bits[idx : idx + FIRST_CELL_BITS].to01(), 2)
    return value, FIRST_CELL_BITS
