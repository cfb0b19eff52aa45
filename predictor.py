from enum import Enum

import numpy as np


def half(n):
    """Halves n, truncating toward zero. Works on ints and numpy arrays."""
    return np.sign(n) * (np.abs(n) // 2)


class Formula(Enum):
    """
    The prediction formulas for x^, the predicted value of pixel x.
    a is the left neighbour, b the one above and c the one above-left.
    """

    A = (1, "x^ = a")
    B = (2, "x^ = b")
    C = (3, "x^ = c")
    A_PLUS_B_MINUS_C = (4, "x^ = a + b - c")
    A_PLUS_HALF_B_MINUS_C = (5, "x^ = a + (b - c) / 2")
    B_PLUS_HALF_A_MINUS_C = (6, "x^ = b + (a - c) / 2")
    AVERAGE_A_B = (7, "x^ = (a + b) / 2")

    def __init__(self, number, label):
        self.number = number
        self.label = label


def predict(formula, a, b, c):
    """Predicts a pixel from its left (a), above (b) and above-left (c) neighbours."""
    if formula is Formula.A:
        return a
    if formula is Formula.B:
        return b
    if formula is Formula.C:
        return c
    if formula is Formula.A_PLUS_B_MINUS_C:
        return a + b - c
    if formula is Formula.A_PLUS_HALF_B_MINUS_C:
        return a + half(b - c)
    if formula is Formula.B_PLUS_HALF_A_MINUS_C:
        return b + half(a - c)
    if formula is Formula.AVERAGE_A_B:
        return half(a + b)
    raise ValueError(f"Unknown prediction formula: {formula!r}")


def get_residuals(image_data, formula):
    """
    Calculates prediction errors (residuals) for an image.
    The first pixel is kept as-is, the first row is predicted from the left
    pixel, the first column from the pixel above, and every other pixel with
    the given formula.
    """
    image = np.asarray(image_data)
    # Non-integer pixels are kept as they are so the code table rejects them
    if image.dtype.kind in "uib":
        image = image.astype(np.int32)
    residuals = np.zeros(image.shape, dtype=image.dtype)
    residuals[0, 0] = image[0, 0]
    # First row: x^ = a
    residuals[0, 1:] = image[0, 1:] - image[0, :-1]
    # First column: x^ = b
    residuals[1:, 0] = image[1:, 0] - image[:-1, 0]
    # Everything else uses the formula on the original neighbours
    predicted = predict(formula, image[1:, :-1], image[:-1, 1:], image[:-1, :-1])
    residuals[1:, 1:] = image[1:, 1:] - predicted
    return residuals


def reconstruct_from_residuals(residuals, formula):
    """
    Reconstructs the image from its residuals.
    This is the inverse of get_residuals: pixels are rebuilt in raster order and
    the predictor only ever sees pixels that were already reconstructed.
    """
    residuals = np.asarray(residuals)
    rows, cols = residuals.shape
    reconstructed = np.zeros((rows, cols), dtype=np.int32)
    for i in range(rows):
        for j in range(cols):
            if i == 0 and j == 0:
                reconstructed[i, j] = residuals[i, j]
            elif i == 0:
                reconstructed[i, j] = reconstructed[i, j - 1] + residuals[i, j]
            elif j == 0:
                reconstructed[i, j] = reconstructed[i - 1, j] + residuals[i, j]
            else:
                prediction = predict(
                    formula,
                    int(reconstructed[i, j - 1]),
                    int(reconstructed[i - 1, j]),
                    int(reconstructed[i - 1, j - 1]),
                )
                reconstructed[i, j] = prediction + residuals[i, j]
    return reconstructed
