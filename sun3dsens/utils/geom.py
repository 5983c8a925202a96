from dataclasses import dataclass
import numpy as np

from ..errors import MalformedCalibration, MissingCalibrationFile


@dataclass(frozen=True)
class CalibrationData:
    intrinsics: np.ndarray  # (4,4) float32
    extrinsics: np.ndarray  # (4,4) float32


def _readonly(m: np.ndarray) -> np.ndarray:
    m.flags.writeable = False
    return m


def identity_extrinsics() -> np.ndarray:
    return _readonly(np.eye(4, dtype=np.float32))


def intrinsics_3x3_to_4x4(K: np.ndarray) -> np.ndarray:
    """Embed a 3x3 pinhole matrix in a 4x4 with [3][3]=1 and zeros elsewhere."""
    K = np.asarray(K, dtype=np.float32)
    if K.shape != (3, 3):
        raise ValueError(f"expected a 3x3 matrix, got {K.shape}")
    M = np.zeros((4, 4), dtype=np.float32)
    M[:3, :3] = K
    M[3, 3] = 1.0
    return _readonly(M)


def read_intrinsics(path: str) -> CalibrationData:
    """
    SUN3D `intrinsics.txt`: nine whitespace separated floats, row-major 3x3
      fx  0 cx
       0 fy cy
       0  0  1
    Extrinsics are not part of the capture, identity is synthesized.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            parts = f.read().split()
    except OSError as e:
        raise MissingCalibrationFile(f"Could not open intrinsics file: {path}") from e
    if len(parts) < 9:
        raise MalformedCalibration(f"expected 9 values in {path}, found {len(parts)}")
    try:
        vals = [float(p) for p in parts[:9]]
    except ValueError as e:
        raise MalformedCalibration(f"non-numeric intrinsics value in {path}") from e
    K = np.array(vals, dtype=np.float32).reshape(3, 3)
    return CalibrationData(intrinsics=intrinsics_3x3_to_4x4(K), extrinsics=identity_extrinsics())
