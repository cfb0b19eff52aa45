from bitarray import bitarray
import numpy as np

from entropy_coding import (
    MalformedStream,
    decode_first_cell,
    decode_symbol,
    encode_first_cell,
    encode_symbol,
)


def residuals_to_codes(residuals):
    """
    Translates a grid of residuals into a grid of codes.

    Args:
        residuals (np.ndarray): 2D array of residuals, first cell holding the raw pixel.

    Returns:
        list[list[bitarray]]: One code per cell, in the same layout.
    """
    residuals = np.asarray(residuals)
    rows, cols = residuals.shape
    codes = []
    for i in range(rows):
        row = []
        for j in range(cols):
            if i == 0 and j == 0:
                row.append(encode_first_cell(residuals[i, j]))
            else:
                row.append(encode_symbol(residuals[i, j]))
        codes.append(row)
    return codes


def codes_to_residuals(codes):
    """Translates a grid of codes back into a 2D array of residuals."""
    if not codes or not codes[0]:
        raise MalformedStream(0, "the code grid has no cells")
    rows, cols = len(codes), len(codes[0])
    residuals = np.zeros((rows, cols), dtype=np.int32)
    for i in range(rows):
        for j in range(cols):
            code = codes[i][j]
            if i == 0 and j == 0:
                residuals[i, j], _ = decode_first_cell(code)
                continue
            value, used = decode_symbol(code, 0)
            if used != len(code):
                raise MalformedStream(used, f"cell ({i}, {j}) holds trailing bits")
            residuals[i, j] = value
    return residuals


def pack(codes):
    """Concatenates a grid of codes, row by row, into one bitstream."""
    bits = bitarray()
    for row in codes:
        for code in row:
            bits.extend(code)
    return bits


def unpack(bits, shape):
    """
    Splits a bitstream back into a grid of codes.

    Args:
        bits (bitarray): The packed bitstream.
        shape (tuple[int, int]): Number of rows and columns to fill.

    Returns:
        list[list[bitarray]]: The codes, one per cell.

    Raises:
        MalformedStream: If the grid has no cells, if the stream ends before
            every cell is filled, if no code matches at the cursor, or if bits
            are left over after the last cell.
    """
    rows, cols = shape
    if rows < 1 or cols < 1:
        raise MalformedStream(0, f"cannot fill a grid of shape {tuple(shape)}")
    codes = []
    idx = 0
    for i in range(rows):
        row = []
        for j in range(cols):
            if idx >= len(bits):
                raise MalformedStream(idx, f"stream ended before cell ({i}, {j})")
            if i == 0 and j == 0:
                _, used = decode_first_cell(bits, idx)
            else:
                _, used = decode_symbol(bits, idx)
            row.append(bits[idx : idx + used])
            idx += used
        codes.append(row)

    if idx != len(bits):
        raise MalformedStream(idx, f"{len(bits) - idx} bits left after the last cell")
    return codes
