"""
Shared fixtures: a synthetic SUN3D sequence folder built with OpenCV.

  <root>/image/<idx>-<ts>.jpg    8-bit BGR JPEG
  <root>/depth/<idx>-<ts>.png    16-bit single channel PNG
  <root>/intrinsics.txt          3x3 row-major
"""

from __future__ import annotations

import importlib.util
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]

COLOR_TS = [10, 20, 35]
DEPTH_TS = [9, 21, 40]
COLOR_SIZE = (16, 12)  # (w, h)
DEPTH_SIZE = (8, 6)
INTRINSICS_TEXT = "1 0 0\n0 1 0\n0 0 1\n"


def make_sun3d_dir(root: Path, color_ts=COLOR_TS, depth_ts=DEPTH_TS, seed: int = 0) -> Path:
    rng = np.random.default_rng(seed)
    (root / "image").mkdir(parents=True)
    (root / "depth").mkdir(parents=True)
    cw, ch = COLOR_SIZE
    dw, dh = DEPTH_SIZE
    for i, ts in enumerate(color_ts):
        img = rng.integers(0, 256, size=(ch, cw, 3), dtype=np.uint8)
        assert cv2.imwrite(str(root / "image" / f"{i:07d}-{ts:012d}.jpg"), img)
    for i, ts in enumerate(depth_ts):
        depth = rng.integers(0, 65536, size=(dh, dw), dtype=np.uint16)
        assert cv2.imwrite(str(root / "depth" / f"{i:07d}-{ts:012d}.png"), depth)
    (root / "intrinsics.txt").write_text(INTRINSICS_TEXT, encoding="utf-8")
    return root


@pytest.fixture
def sun3d_dir(tmp_path: Path) -> Path:
    return make_sun3d_dir(tmp_path / "seq")


@pytest.fixture
def load_script():
    """Import a numbered script from scripts/ as a module."""
    def _load(filename: str):
        path = ROOT / "scripts" / filename
        spec = importlib.util.spec_from_file_location(f"script_{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    return _load
