import json
import os
from datetime import datetime

import numpy as np
from PIL import Image

import codec
from entropy_coding import MalformedStream, UnknownSymbol
from metrics import compute_metrics
from predictor import Formula

VALUE_CELL_WIDTH = 5
CODE_CELL_WIDTH = 14

# --- Lines printed during this run, saved to the JSON log at the end ---
log_entries = []


def log(*args):
    """Prints a message to the console and keeps it for the JSON run log."""
    message = " ".join(map(str, args))
    print(message)
    log_entries.append(message)


def get_original_image():
    """The 16x16 grayscale test image, one integer per pixel."""
    return np.array(
        [
            [88, 88, 88, 89, 90, 91, 92, 93, 94, 95, 93, 95, 96, 98, 97, 94],
            [93, 91, 91, 90, 92, 93, 94, 94, 95, 95, 92, 93, 95, 95, 95, 96],
            [95, 95, 95, 95, 96, 97, 94, 96, 97, 96, 98, 97, 98, 99, 95, 97],
            [97, 96, 98, 97, 98, 94, 95, 97, 99, 100, 99, 101, 100, 100, 98, 98],
            [99, 100, 97, 99, 100, 100, 98, 98, 100, 101, 100, 99, 101, 102, 99, 100],
            [100, 101, 100, 99, 101, 102, 99, 100, 103, 102, 103, 101, 101, 100, 102, 101],
            [100, 102, 103, 101, 101, 100, 102, 103, 103, 105, 104, 104, 103, 104, 104, 103],
            [103, 105, 103, 105, 105, 104, 104, 104, 102, 101, 100, 100, 100, 101, 102, 103],
            [104, 104, 105, 105, 105, 104, 104, 106, 102, 103, 101, 101, 102, 101, 102, 102],
            [102, 105, 105, 105, 106, 104, 106, 104, 103, 101, 100, 100, 101, 102, 102, 103],
            [102, 105, 105, 105, 106, 104, 106, 104, 103, 101, 100, 100, 101, 102, 102, 103],
            [102, 105, 105, 105, 106, 104, 105, 104, 103, 101, 102, 100, 102, 102, 102, 103],
            [104, 105, 106, 105, 106, 104, 106, 103, 103, 102, 100, 100, 101, 102, 102, 103],
            [103, 105, 107, 107, 106, 104, 106, 104, 103, 101, 100, 100, 101, 102, 102, 103],
            [103, 105, 106, 108, 106, 104, 106, 105, 103, 101, 101, 100, 101, 103, 102, 105],
            [102, 105, 105, 105, 106, 104, 106, 107, 104, 103, 102, 100, 101, 104, 102, 104],
        ],
        dtype=np.int32,
    )


def format_grid(grid, cell_width=VALUE_CELL_WIDTH):
    """Formats a 2D grid as text, one row per line, cells padded to cell_width."""
    lines = []
    for row in grid:
        cells = [_cell_text(cell) for cell in row]
        padded = [cell.ljust(cell_width) for cell in cells[:-1]]
        lines.append("".join(padded) + cells[-1])
    return "\n".join(lines) + "\n"


def _cell_text(cell):
    # bitarray's str() is "bitarray('...')", we only want the bits
    if hasattr(cell, "to01"):
        return cell.to01()
    return str(cell)


def build_report(image_data, formula):
    """
    Runs the full encode/decode pipeline on an image with one formula.

    Returns:
        tuple[str, CompressionStats, codec.EncodeStages]: The report text, the
        statistics and the encoder output the report was built from.
    """
    image = np.asarray(image_data)
    lines = [f"Prediction formula {formula.number}: {formula.label}", ""]
    lines += ["Original image:", format_grid(image)]

    encoded = codec.encode_stages(image, formula)
    lines += ["Image encoded as differences:", format_grid(encoded.residuals)]
    lines += [
        "Image encoded with Huffman codes:",
        format_grid(encoded.codes, CODE_CELL_WIDTH),
    ]
    lines += ["Image encoded as a binary sequence:", encoded.bits.to01()]
    lines += [
        "END OF ENCODE PROCESS",
        "-" * 54,
        "DECODING ENCODED IMAGE:",
    ]

    decoded = codec.decode_stages(encoded.bits, image.shape, formula)
    lines += [
        "Decoded image as Huffman codes",
        format_grid(decoded.codes, CODE_CELL_WIDTH),
    ]
    lines += ["Decoded image as differences:", format_grid(decoded.residuals)]
    lines += ["Final decoded image:", format_grid(decoded.image)]

    stats = compute_metrics(image, decoded.image, len(encoded.bits))
    lines += ["", "-" * 50, "COMPRESSION STATISTICS"]
    lines.append(f"Compression ratio = {stats.compression_ratio}")
    lines.append(
        f"Average bits per pixel in compressed image = {stats.avg_bits_per_pixel}"
    )
    lines.append(f"RMS error = {stats.rms_error}")
    return "\n".join(lines) + "\n", stats, encoded


def save_residual_image(residuals, file_path):
    """
    Saves the residuals as a viewable image.
    A residual of 0 (perfect prediction) is mapped to mid-gray (128).
    """
    residuals_visual = np.asarray(residuals).astype(np.int16) + 128
    residuals_visual = np.clip(residuals_visual, 0, 255).astype(np.uint8)
    Image.fromarray(residuals_visual).save(file_path)


def save_logs_to_json(file_path, logs):
    """
    Appends the log messages from the current run to a JSON file.
    Each run is stored as a separate object in a list.
    """
    try:
        with open(file_path, "r") as f:
            all_runs_data = json.load(f)
        if not isinstance(all_runs_data, list):
            all_runs_data = []
    except (FileNotFoundError, json.JSONDecodeError):
        all_runs_data = []

    all_runs_data.append(
        {
            "timestamp": datetime.now().isoformat(),
            "output": list(logs),
        }
    )

    with open(file_path, "w") as f:
        json.dump(all_runs_data, f, indent=4)


def run_all(image_data, results_dir):
    """Writes one report per prediction formula. Returns {formula: stats}."""
    os.makedirs(results_dir, exist_ok=True)
    all_stats = {}
    for formula in Formula:
        try:
            report, stats, encoded = build_report(image_data, formula)
        except (UnknownSymbol, MalformedStream) as e:
            log(f"Prediction formula {formula.number} failed: {e}")
            continue

        path = os.path.join(results_dir, f"LosslessCodec{formula.number}.txt")
        with open(path, "w") as f:
            f.write(report)

        save_residual_image(
            encoded.residuals,
            os.path.join(results_dir, f"LosslessCodec{formula.number}_residuals.png"),
        )

        all_stats[formula] = stats
        log(
            f"Results with prediction formula {formula.number} written to {path} "
            f"(ratio {stats.compression_ratio:.3f}, "
            f"{stats.avg_bits_per_pixel:.3f} bpp)"
        )
    return all_stats


if __name__ == "__main__":
    # --- Configuration ---
    RESULTS_DIR = "results"
    LOG_PATH = "output.json"

    run_all(get_original_image(), RESULTS_DIR)
    save_logs_to_json(LOG_PATH, log_entries)
    print(f"\nLog messages from this run have been appended to '{LOG_PATH}'")
