"""
.sens container (ScanNet sensor stream, version 4), little-endian, no padding.

  header:  u32 version | u64 name_len | name bytes
           f32[16] color intrinsics | f32[16] color extrinsics
           f32[16] depth intrinsics | f32[16] depth extrinsics
           i32 color compression | i32 depth compression
           u32 color w | u32 color h | u32 depth w | u32 depth h
           f32 depth shift | u64 num_frames
  frame:   f32[16] camera_to_world | u64 ts color | u64 ts depth
           u64 color size | u64 depth size | color bytes | depth bytes
  trailer: u8 0
"""
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO, List, Optional, Tuple
import numpy as np

from .errors import PartialRead
from .utils.geom import CalibrationData

SENS_VERSION = 4
DEFAULT_SENSOR_NAME = "Unknown"
DEFAULT_DEPTH_SHIFT = 1000.0


class ColorCompression(IntEnum):
    UNKNOWN = -1
    RAW = 0
    PNG = 1
    JPEG = 2


class DepthCompression(IntEnum):
    UNKNOWN = -1
    RAW_USHORT = 0
    ZLIB_USHORT = 1
    OCCI_USHORT = 2


def placeholder_pose() -> np.ndarray:
    return np.full((4, 4), -np.inf, dtype=np.float32)


@dataclass
class SensHeader:
    version: int
    sensor_name: str
    intrinsics_color: np.ndarray
    extrinsics_color: np.ndarray
    intrinsics_depth: np.ndarray
    extrinsics_depth: np.ndarray
    color_compression: ColorCompression
    depth_compression: DepthCompression
    color_size: Tuple[int, int]  # (w, h)
    depth_size: Tuple[int, int]
    depth_shift: float
    num_frames: int


@dataclass
class SensFrame:
    timestamp_color: int
    timestamp_depth: int
    color_bytes: bytes
    depth_bytes: bytes
    camera_to_world: np.ndarray = field(default_factory=placeholder_pose)


def _mat_bytes(m: np.ndarray) -> bytes:
    m = np.asarray(m, dtype="<f4")
    if m.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got {m.shape}")
    return m.tobytes()


def write_header(f: BinaryIO, sensor_name: str, calibration: CalibrationData,
                 color_compression: ColorCompression, depth_compression: DepthCompression,
                 color_size: Tuple[int, int], depth_size: Tuple[int, int],
                 depth_shift: float, num_frames: int, version: int = SENS_VERSION) -> None:
    """Color and depth share the same calibration in a SUN3D capture."""
    name = sensor_name.encode("utf-8")
    f.write(struct.pack("<IQ", version, len(name)))
    f.write(name)
    f.write(_mat_bytes(calibration.intrinsics))
    f.write(_mat_bytes(calibration.extrinsics))
    f.write(_mat_bytes(calibration.intrinsics))
    f.write(_mat_bytes(calibration.extrinsics))
    f.write(struct.pack("<ii", int(ColorCompression(color_compression)), int(DepthCompression(depth_compression))))
    f.write(struct.pack("<IIII", color_size[0], color_size[1], depth_size[0], depth_size[1]))
    f.write(struct.pack("<fQ", depth_shift, num_frames))


def write_frame(f: BinaryIO, timestamp_color: int, timestamp_depth: int,
                color_bytes: bytes, depth_bytes: bytes,
                pose: Optional[np.ndarray] = None) -> None:
    f.write(_mat_bytes(placeholder_pose() if pose is None else pose))
    f.write(struct.pack("<QQQQ", timestamp_color, timestamp_depth, len(color_bytes), len(depth_bytes)))
    f.write(color_bytes)
    f.write(depth_bytes)


def write_trailer(f: BinaryIO) -> None:
    f.write(b"\x00")


# --------------------------
# reading
# --------------------------
def read_exact(f: BinaryIO, n: int) -> bytes:
    data = f.read(n)
    if len(data) != n:
        raise PartialRead(f"truncated .sens stream: wanted {n} bytes, got {len(data)}")
    return data


def _read_mat(f: BinaryIO) -> np.ndarray:
    return np.frombuffer(read_exact(f, 64), dtype="<f4").reshape(4, 4).astype(np.float32)


def read_header(f: BinaryIO) -> SensHeader:
    version, name_len = struct.unpack("<IQ", read_exact(f, 12))
    if version != SENS_VERSION:
        raise ValueError(f"unsupported .sens version {version}")
    name = read_exact(f, name_len).decode("utf-8")
    ic, ec, id_, ed = (_read_mat(f) for _ in range(4))
    cc, dc = struct.unpack("<ii", read_exact(f, 8))
    cw, ch, dw, dh = struct.unpack("<IIII", read_exact(f, 16))
    depth_shift, num_frames = struct.unpack("<fQ", read_exact(f, 12))
    return SensHeader(
        version=version, sensor_name=name,
        intrinsics_color=ic, extrinsics_color=ec, intrinsics_depth=id_, extrinsics_depth=ed,
        color_compression=ColorCompression(cc), depth_compression=DepthCompression(dc),
        color_size=(cw, ch), depth_size=(dw, dh),
        depth_shift=depth_shift, num_frames=num_frames,
    )


def read_frame(f: BinaryIO) -> SensFrame:
    pose = _read_mat(f)
    ts_c, ts_d, n_c, n_d = struct.unpack("<QQQQ", read_exact(f, 32))
    color = read_exact(f, n_c)
    depth = read_exact(f, n_d)
    return SensFrame(timestamp_color=ts_c, timestamp_depth=ts_d,
                     color_bytes=color, depth_bytes=depth, camera_to_world=pose)


def read_trailer(f: BinaryIO) -> None:
    if read_exact(f, 1) != b"\x00":
        raise ValueError("missing .sens trailer byte")


def read_sens(path: str) -> Tuple[SensHeader, List[SensFrame]]:
    """Whole file in memory; use SensFramesDataset for large captures."""
    with open(path, "rb") as f:
        header = read_header(f)
        frames = [read_frame(f) for _ in range(header.num_frames)]
        read_trailer(f)
    return header, frames
