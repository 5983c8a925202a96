"""
Calibration loading from intrinsics.txt.
"""

from __future__ import annotations

import numpy as np
import pytest

from sun3dsens.errors import MalformedCalibration, MissingCalibrationFile
from sun3dsens.utils.geom import intrinsics_3x3_to_4x4, read_intrinsics


def test_read_intrinsics_embeds_3x3(tmp_path):
    p = tmp_path / "intrinsics.txt"
    p.write_text("570.342 0 320\n0 570.342 240\n0 0 1\n", encoding="utf-8")

    calib = read_intrinsics(str(p))

    expected = np.array([
        [570.342, 0, 320, 0],
        [0, 570.342, 240, 0],
        [0, 0, 1, 0],
        [0, 0, 0, 1],
    ], dtype=np.float32)
    np.testing.assert_array_equal(calib.intrinsics, expected)
    np.testing.assert_array_equal(calib.extrinsics, np.eye(4, dtype=np.float32))
    assert calib.intrinsics.dtype == np.float32


def test_read_intrinsics_any_whitespace_and_trailing_tokens(tmp_path):
    p = tmp_path / "intrinsics.txt"
    p.write_text("1\t2 3 4\n\n5 6 7 8 9 10 extra", encoding="utf-8")
    calib = read_intrinsics(str(p))
    np.testing.assert_array_equal(calib.intrinsics[:3, :3], np.arange(1, 10, dtype=np.float32).reshape(3, 3))


def test_calibration_is_read_only(tmp_path):
    p = tmp_path / "intrinsics.txt"
    p.write_text("1 0 0 0 1 0 0 0 1", encoding="utf-8")
    calib = read_intrinsics(str(p))
    with pytest.raises(ValueError):
        calib.intrinsics[0, 0] = 5.0


def test_missing_intrinsics_file(tmp_path):
    with pytest.raises(MissingCalibrationFile):
        read_intrinsics(str(tmp_path / "intrinsics.txt"))


def test_missing_intrinsics_is_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_intrinsics(str(tmp_path / "intrinsics.txt"))


@pytest.mark.parametrize("text", ["", "1 2 3 4 5 6 7 8", "1 2 3 4 five 6 7 8 9"])
def test_malformed_intrinsics(tmp_path, text):
    p = tmp_path / "intrinsics.txt"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(MalformedCalibration):
        read_intrinsics(str(p))


def test_intrinsics_3x3_to_4x4_rejects_bad_shape():
    with pytest.raises(ValueError):
        intrinsics_3x3_to_4x4(np.eye(4))
