"""
Tests for the report driver.
"""

import json

import numpy as np
from bitarray import bitarray

import codec
import main
from predictor import Formula


def test_sample_image_is_16_by_16():
    image = main.get_original_image()
    assert image.shape == (16, 16)
    assert image[0, 0] == 88


def test_format_grid_pads_all_but_last_cell():
    text = main.format_grid([[1, 22, 3], [-4, 5, 6]], cell_width=4)
    assert text == "1   22  3\n-4  5   6\n"


def test_format_grid_prints_codes_as_bits():
    text = main.format_grid([[bitarray("011"), bitarray("1")]], cell_width=5)
    assert text == "011  1\n"


def test_build_report_sections():
    report, stats, _ = main.build_report(main.get_original_image(), Formula.A)
    assert report.startswith("Prediction formula 1: x^ = a\n")
    for heading in [
        "Original image:",
        "Image encoded as differences:",
        "Image encoded with Huffman codes:",
        "Image encoded as a binary sequence:",
        "END OF ENCODE PROCESS",
        "DECODING ENCODED IMAGE:",
        "Final decoded image:",
        "COMPRESSION STATISTICS",
    ]:
        assert heading in report
    assert f"Compression ratio = {stats.compression_ratio}" in report
    assert stats.rms_error == 0


def test_run_all_writes_reports(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "log_entries", [])
    all_stats = main.run_all(main.get_original_image(), str(tmp_path))

    assert set(all_stats) == set(Formula)
    for formula in Formula:
        assert (tmp_path / f"LosslessCodec{formula.number}.txt").exists()
        assert (tmp_path / f"LosslessCodec{formula.number}_residuals.png").exists()
    assert len(main.log_entries) == len(Formula)


def test_run_all_logs_failed_formula(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "log_entries", [])
    image = np.zeros((4, 4), dtype=np.int32)
    image[0, 1] = 200
    all_stats = main.run_all(image, str(tmp_path))

    assert all_stats == {}
    assert all("failed" in line for line in main.log_entries)


def test_save_logs_to_json_appends_runs(tmp_path):
    path = tmp_path / "output.json"
    path.write_text("not json")
    main.save_logs_to_json(str(path), ["first"])
    main.save_logs_to_json(str(path), ["second"])

    runs = json.loads(path.read_text())
    assert [run["output"] for run in runs] == [["first"], ["second"]]
    assert all("timestamp" in run for run in runs)


def test_run_all_encodes_each_formula_once(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "log_entries", [])
    calls = []
    encode_stages = main.codec.encode_stages

    def counting_encode_stages(image_data, formula):
        calls.append(formula)
        return encode_stages(image_data, formula)

    monkeypatch.setattr(main.codec, "encode_stages", counting_encode_stages)
    main.run_all(main.get_original_image(), str(tmp_path))

    assert calls == list(Formula)


def test_build_report_returns_encoder_output():
    image = main.get_original_image()
    _, stats, encoded = main.build_report(image, Formula.AVERAGE_A_B)
    assert encoded.bits == codec.encode(image, Formula.AVERAGE_A_B)
    assert stats.avg_bits_per_pixel == len(encoded.bits) / image.size
