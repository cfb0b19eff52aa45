import math
from dataclasses import dataclass

import numpy as np

BIT_DEPTH = 8


@dataclass(frozen=True)
class CompressionStats:
    compression_ratio: float
    avg_bits_per_pixel: float
    rms_error: float


def compression_ratio(num_pixels, packed_bit_count, bit_depth=BIT_DEPTH):
    original_bits = bit_depth * num_pixels
    return original_bits / packed_bit_count if packed_bit_count > 0 else float("inf")


def bits_per_pixel(num_pixels, packed_bit_count):
    return packed_bit_count / num_pixels


def rms_error(original, reconstructed):
    """
    Root of the summed squared error, divided by the pixel count.
    Zero when the two images are identical.
    """
    diff = np.asarray(original, dtype=np.float64) - np.asarray(
        reconstructed, dtype=np.float64
    )
    return math.sqrt(float(np.sum(diff**2))) / diff.size


def compute_metrics(original, reconstructed, packed_bit_count, bit_depth=BIT_DEPTH):
    num_pixels = np.asarray(original).size
    return CompressionStats(
        compression_ratio=compression_ratio(num_pixels, packed_bit_count, bit_depth),
        avg_bits_per_pixel=bits_per_pixel(num_pixels, packed_bit_count),
        rms_error=rms_error(original, reconstructed),
    )
