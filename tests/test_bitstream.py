"""
Unit tests for packing code grids into a bitstream and splitting them back.
"""

import numpy as np
import pytest
from bitarray import bitarray

from bitstream import codes_to_residuals, pack, residuals_to_codes, unpack
from entropy_coding import MalformedStream, UnknownSymbol


@pytest.fixture
def residuals():
    return np.array([[100, 0, 1], [-1, 2, 0], [0, -6, 6]])


def test_residuals_to_codes(residuals):
    codes = residuals_to_codes(residuals)
    assert codes[0][0] == bitarray("01100100")
    assert codes[0][1] == bitarray("1")
    assert codes[1][0] == bitarray("011")
    assert codes[2][2] == bitarray("010101010100")


def test_residuals_to_codes_rejects_unknown_residual(residuals):
    residuals[1, 1] = 7
    with pytest.raises(UnknownSymbol):
        residuals_to_codes(residuals)


def test_pack_length_is_sum_of_code_lengths(residuals):
    codes = residuals_to_codes(residuals)
    bits = pack(codes)
    assert len(bits) == sum(len(code) for row in codes for code in row)
    assert bits[:8] == bitarray("01100100")
    assert bits[8:11] == bitarray("100")


def test_unpack_restores_code_grid(residuals):
    codes = residuals_to_codes(residuals)
    unpacked = unpack(pack(codes), residuals.shape)
    assert unpacked == codes
    assert np.array_equal(codes_to_residuals(unpacked), residuals)


def test_unpack_empty_stream():
    with pytest.raises(MalformedStream):
        unpack(bitarray(), (2, 2))


def test_unpack_stream_too_short(residuals):
    bits = pack(residuals_to_codes(residuals))
    with pytest.raises(MalformedStream):
        unpack(bits[:-1], residuals.shape)


def test_unpack_missing_last_cell(residuals):
    codes = residuals_to_codes(residuals)
    bits = pack(codes)
    with pytest.raises(MalformedStream):
        unpack(bits[: len(bits) - len(codes[-1][-1])], residuals.shape)


def test_unpack_rejects_trailing_bits(residuals):
    bits = pack(residuals_to_codes(residuals))
    bits.append(1)
    with pytest.raises(MalformedStream):
        unpack(bits, residuals.shape)


def test_unpack_invalid_code():
    # first pixel, then "010" which is not a complete code
    bits = bitarray("00000001" + "010")
    with pytest.raises(MalformedStream):
        unpack(bits, (1, 2))


def test_codes_to_residuals_rejects_cell_with_extra_bits():
    codes = [[bitarray("00000001"), bitarray("11")]]
    with pytest.raises(MalformedStream):
        codes_to_residuals(codes)


@pytest.mark.parametrize("shape", [(0, 0), (0, 3), (3, 0)])
def test_unpack_empty_grid(shape):
    with pytest.raises(MalformedStream):
        unpack(bitarray(), shape)


def test_codes_to_residuals_empty_grid():
    with pytest.raises(MalformedStream):
        codes_to_residuals([])
    with pytest.raises(MalformedStream):
        codes_to_residuals([[]])
