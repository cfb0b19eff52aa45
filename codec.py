"""
Encode/decode pipeline: pixels -> residuals -> codes -> bitstream, and back.
"""

from collections import namedtuple

import numpy as np

import bitstream
import predictor

EncodeStages = namedtuple("EncodeStages", ["residuals", "codes", "bits"])
DecodeStages = namedtuple("DecodeStages", ["codes", "residuals", "image"])


def encode_stages(image_data, formula):
    """Runs the encoder and keeps every intermediate result."""
    residuals = predictor.get_residuals(image_data, formula)
    codes = bitstream.residuals_to_codes(residuals)
    bits = bitstream.pack(codes)
    return EncodeStages(residuals, codes, bits)


def decode_stages(bits, shape, formula):
    """Runs the decoder and keeps every intermediate result."""
    codes = bitstream.unpack(bits, shape)
    residuals = bitstream.codes_to_residuals(codes)
    image = predictor.reconstruct_from_residuals(residuals, formula)
    return DecodeStages(codes, residuals, image)


def encode(image_data, formula):
    """Compresses a grayscale image into a bitarray."""
    return encode_stages(image_data, formula).bits


def decode(bits, shape, formula):
    """Decompresses a bitarray produced by encode() with the same formula."""
    return decode_stages(bits, tuple(shape), formula).image


def roundtrip_ok(image_data, formula):
    """Checks that encoding then decoding gives back the exact image."""
    image = np.asarray(image_data)
    return np.array_equal(image, decode(encode(image, formula), image.shape, formula))
