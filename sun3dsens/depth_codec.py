import zlib
import numpy as np

DEPTH_ROTATE_BITS = 3
ZLIB_LEVEL = 8


def _check_u16(depth: np.ndarray) -> np.ndarray:
    depth = np.asarray(depth)
    if depth.dtype != np.uint16 or depth.ndim != 2:
        raise ValueError(f"expected (H,W) uint16 depth, got {depth.dtype} {depth.shape}")
    return depth


def rotate_right_u16(depth: np.ndarray, bits: int = DEPTH_ROTATE_BITS) -> np.ndarray:
    """
    Cyclic right shift of every 16-bit sample: (v >> bits) | (v << (16-bits)).
    SUN3D depth PNGs store millimetres rotated left by 3, so this recovers mm.
    """
    d = np.asarray(depth, dtype=np.uint16)
    return ((d >> np.uint16(bits)) | (d << np.uint16(16 - bits))).astype(np.uint16)


def rotate_left_u16(depth: np.ndarray, bits: int = DEPTH_ROTATE_BITS) -> np.ndarray:
    d = np.asarray(depth, dtype=np.uint16)
    return ((d << np.uint16(bits)) | (d >> np.uint16(16 - bits))).astype(np.uint16)


def encode_depth(depth: np.ndarray, level: int = ZLIB_LEVEL) -> bytes:
    """
    depth: (H,W) uint16 as loaded from the source image
    Returns the zlib stream of the rotated samples (little-endian bytes).
    """
    d = rotate_right_u16(_check_u16(depth))
    return zlib.compress(d.astype("<u2").tobytes(), level)


def inflate_depth(payload: bytes, width: int, height: int) -> np.ndarray:
    """Stored samples, rotation not undone. For SUN3D sources these are mm."""
    raw = zlib.decompress(payload)
    if len(raw) != width * height * 2:
        raise ValueError(f"depth payload inflates to {len(raw)} bytes, expected {width * height * 2}")
    return np.frombuffer(raw, dtype="<u2").reshape(height, width).astype(np.uint16)


def decode_depth(payload: bytes, width: int, height: int) -> np.ndarray:
    """Exact inverse of encode_depth."""
    return rotate_left_u16(inflate_depth(payload, width, height))
